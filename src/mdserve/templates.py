"""
HTML page layout for rendered documents.
"""

from flask import render_template_string

from .config import RELOAD_ENDPOINT, STATIC_PREFIX
from .errors import RenderError
from .renderer import DARK_CODE_STYLE, LIGHT_CODE_STYLE, get_code_css

LAYOUT_TEMPLATE = """<!DOCTYPE html>
<html lang="en" data-theme="{{ theme }}">
<head>
    <meta charset="UTF-8">
    <meta name="viewport" content="width=device-width, initial-scale=1.0">
    <title>{{ title }}</title>
    <link rel="stylesheet" href="{{ static_prefix }}css/markdown.css">
    {% if theme == 'light' %}
    <style>{{ css_code_light | safe }}</style>
    {% elif theme == 'dark' %}
    <style>{{ css_code_dark | safe }}</style>
    {% else %}
    <style media="(prefers-color-scheme: light)">{{ css_code_light | safe }}</style>
    <style media="(prefers-color-scheme: dark)">{{ css_code_dark | safe }}</style>
    {% endif %}
</head>
<body>
    <main class="container">
        <article class="markdown-body{% if bounding_box %} bounding-box{% endif %}">
            {{ content | safe }}
        </article>
    </main>

    {% if has_mermaid %}
    <script src="https://cdn.jsdelivr.net/npm/mermaid@11.9.0/dist/mermaid.min.js"></script>
    <script>
        var prefersDark = window.matchMedia('(prefers-color-scheme: dark)').matches;
        var theme = '{{ theme }}' === 'dark' || ('{{ theme }}' === 'auto' && prefersDark) ? 'dark' : 'default';
        mermaid.initialize({ startOnLoad: true, theme: theme });
    </script>
    {% endif %}
    {% if live_reload %}
    <script src="{{ static_prefix }}js/reload.js" data-endpoint="{{ reload_endpoint }}"></script>
    {% endif %}
</body>
</html>
"""


def render_page(content: str, title: str, theme: str, bounding_box: bool, live_reload: bool = False) -> str:
    """
    Wrap an HTML fragment in the page layout.

    Must be called inside a Flask application context.

    Raises:
        RenderError: If the template cannot be rendered.
    """
    try:
        return render_template_string(
            LAYOUT_TEMPLATE,
            title=title,
            content=content,
            theme=theme,
            bounding_box=bounding_box,
            live_reload=live_reload,
            has_mermaid='class="mermaid"' in content,
            css_code_light=get_code_css(LIGHT_CODE_STYLE),
            css_code_dark=get_code_css(DARK_CODE_STYLE),
            static_prefix=STATIC_PREFIX,
            reload_endpoint=RELOAD_ENDPOINT,
        )
    except Exception as e:
        raise RenderError(f"Error rendering page template: {e}") from e
