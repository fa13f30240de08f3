"""
Jinja2 rendering for the transactional emails (login passcode, welcome).

Templates live in app/templates/email. Every template receives app_name;
a variable missing from the context is an error rather than an empty string.
"""

from pathlib import Path
from typing import Any, Dict, List

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

APP_NAME = "Adaptive Quiz Learner"

TEMPLATE_DIR = Path(__file__).resolve().parents[2] / "templates" / "email"

_env = Environment(
    loader=FileSystemLoader(str(TEMPLATE_DIR)),
    autoescape=select_autoescape(["html"]),
    undefined=StrictUndefined,
)


def render_template(template_name: str, context: Dict[str, Any]) -> str:
    """
    Render one email template.

    Raises:
        jinja2.UndefinedError: If the template uses a variable not in context
    """
    return _env.get_template(template_name).render(app_name=APP_NAME, **context)


def render_otp_email(otp: str, expires_in: str, is_test: bool = False) -> str:
    return render_template("otp.html", {"otp": otp, "expires_in": expires_in, "is_test": is_test})


def render_welcome_email(email: str, role: str, features: List[str]) -> str:
    return render_template("welcome.html", {"email": email, "role": role, "features": features})
