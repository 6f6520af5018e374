import inspect
import logging
from pathlib import Path

from jinja2 import Environment, FileSystemLoader, StrictUndefined, TemplateError

from src.hyperbeam.models.exceptions import PromptBuildError
from src.hyperbeam.prompts import assistant_rules

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).resolve().parent / "templates"


class PromptManager:
    """
    Manages loading and rendering of Jinja2 prompt templates.
    """
    def __init__(self, template_dir: Path = TEMPLATE_DIR):
        """Initializes the PromptManager."""
        if not template_dir.exists():
            logger.error("Prompt template directory not found at: %s", template_dir)
            raise FileNotFoundError(f"Prompt template directory not found: {template_dir}")

        # Prompts are plain text; code snippets must reach the model unescaped.
        self.env = Environment(
            loader=FileSystemLoader(template_dir),
            autoescape=False,
            trim_blocks=True,
            lstrip_blocks=True,
            undefined=StrictUndefined,
        )
        self._load_rules_as_globals()
        logger.debug("PromptManager initialized from %s", template_dir)

    def _load_rules_as_globals(self):
        """
        Inspects the assistant_rules module and loads all uppercase constants
        as global variables in the Jinja2 environment.
        """
        for name, value in inspect.getmembers(assistant_rules):
            if name.isupper() and isinstance(value, str):
                self.env.globals[name] = value

    def render(self, template_name: str, strip: bool = True, **kwargs) -> str:
        """
        Renders a prompt template with the given context.

        Args:
            template_name: The name of the template file (e.g., 'explain_code.jinja2').
            strip: Remove surrounding whitespace from the result. Templates that
                end with user code pass ``False`` so the code arrives unchanged.
            **kwargs: The context variables to pass to the template.

        Returns:
            The rendered prompt.

        Raises:
            PromptBuildError: If the template is missing or fails to render.
        """
        try:
            template = self.env.get_template(template_name)
            rendered = template.render(**kwargs)
        except TemplateError as e:
            logger.error("Failed to render prompt template '%s': %s", template_name, e, exc_info=True)
            raise PromptBuildError(f"Failed to render prompt template '{template_name}'", cause=e) from e
        return rendered.strip() if strip else rendered
