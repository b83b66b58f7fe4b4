from pathlib import Path

from fastapi.templating import Jinja2Templates

TEMPLATES_DIR = Path(__file__).resolve().parent / "templates"

# Create a single, shared Jinja2Templates instance (e-mail bodies only)
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))
