# ats_app/utils/template_renderer.py

"""
Placeholder substitution for admin-editable email templates.

Templates use ``{{ name }}`` placeholders. Values are HTML-escaped unless the
placeholder name is listed in ``safe_keys`` (used for links the application
builds itself).
"""

import re

from markupsafe import escape

PLACEHOLDER_PATTERN = re.compile(r"{{\s*([a-zA-Z0-9_]+)\s*}}")


def render_placeholders(template, variables=None, safe_keys=()):
    """Substitute placeholders in ``template``; unknown or None values render empty"""
    variables = variables or {}
    safe = set(safe_keys or ())

    def _replace(match):
        key = match.group(1)
        value = variables.get(key)
        if value is None:
            return ""
        text = str(value)
        if key in safe:
            return text
        return str(escape(text))

    return PLACEHOLDER_PATTERN.sub(_replace, str(template or ""))


def newlines_to_breaks(html):
    """Convert plain newlines typed into the admin editor into ``<br/>`` tags"""
    return html.replace("\r\n", "\n").replace("\n", "<br/>")
