from functools import lru_cache

from jinja2 import Environment, PackageLoader, select_autoescape


@lru_cache(maxsize=1)
def get_environment() -> Environment:
    """
    Return the Jinja environment for the templates shipped in bird_tagger/templates.
    """
    return Environment(
        loader=PackageLoader("bird_tagger", "templates"),
        autoescape=select_autoescape(["html", "xmp"]),
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
    )


def render(template_name: str, **context) -> str:
    return get_environment().get_template(template_name).render(**context)
