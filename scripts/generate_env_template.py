"""Write .env.example listing every setting with its default value."""
from pathlib import Path

from backend.config import ROOT_DIR, Settings
from backend.utils.auth_jwt import MIN_SECRET_LENGTH

SECRET_FIELDS = {"aws_access_key_id", "aws_secret_access_key", "jwt_secret"}
COMMENTS = {
    "data_dir": "# Relative paths resolve against the project root",
    "jwt_secret": f"# Required: at least {MIN_SECRET_LENGTH} random characters, e.g. `openssl rand -hex 32`",
}

dest = ROOT_DIR / ".env.example"

lines = []
for name, field in Settings.model_fields.items():
    default = field.default
    if name in SECRET_FIELDS or default is None:
        value = ""
    elif isinstance(default, list):
        value = ",".join(str(item) for item in default)
    elif isinstance(default, Path):
        value = str(default.relative_to(ROOT_DIR)) if default.is_relative_to(ROOT_DIR) else str(default)
    else:
        value = str(default)
    if name in COMMENTS:
        lines.append(COMMENTS[name])
    lines.append(f"{name.upper()}={value}")

dest.write_text("\n".join(lines) + "\n")
print(f"Wrote template to {dest}")
