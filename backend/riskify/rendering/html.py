"""HTML rendering of a DocumentModel through the fixed Jinja2 SWMS template."""

from functools import lru_cache

from jinja2 import Environment, PackageLoader, StrictUndefined, select_autoescape

from riskify.documents.model import DocumentModel

TEMPLATE_NAME = "swms.html.j2"

# The sign in register is padded with blank rows up to this many
SIGN_IN_REGISTER_ROWS = 15


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """Shared Jinja2 environment; templates are read once per process."""
    return Environment(
        loader=PackageLoader("riskify.rendering", "templates"),
        autoescape=select_autoescape(["html", "j2"]),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_html(document: DocumentModel) -> str:
    """Substitute the document fields into the SWMS template."""
    template = get_environment().get_template(TEMPLATE_NAME)
    return template.render(
        document=document,
        project=document.project,
        ppe_items=document.ppe_items,
        blank_sign_in_rows=max(0, SIGN_IN_REGISTER_ROWS - len(document.sign_in_entries)),
        prepared_on=document.prepared_on.strftime("%d/%m/%Y"),
    )
