import logging
from typing import Callable, Dict, Optional

import mistune
from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name
from pygments.util import ClassNotFound

from blogo.errors import ParseError
from blogo.result import Result, err, ok

logger = logging.getLogger(__name__)

FenceRenderer = Callable[[str], str]


def render_mermaid(code: str) -> str:
    """Emit the diagram source for client-side rendering."""
    return f'<pre class="mermaid">{mistune.escape(code.strip())}</pre>\n'


DEFAULT_FENCE_RENDERERS: Dict[str, FenceRenderer] = {"mermaid": render_mermaid}


def plain_code_block(code: str, lang: Optional[str] = None) -> str:
    css = f' class="language-{mistune.escape(lang)}"' if lang else ""
    return f"<pre><code{css}>{mistune.escape(code)}</code></pre>\n"


class HighlightRenderer(mistune.HTMLRenderer):
    def __init__(self, fence_renderers: Dict[str, FenceRenderer]):
        super().__init__(escape=False)
        self.fence_renderers = fence_renderers
        self.formatter = HtmlFormatter(cssclass="highlight")

    def block_code(self, code: str, info: Optional[str] = None) -> str:
        lang = info.strip().split(None, 1)[0].lower() if info and info.strip() else None
        if not lang:
            return plain_code_block(code)

        hook = self.fence_renderers.get(lang)
        if hook is not None:
            try:
                return hook(code)
            except Exception as e:
                logger.warning(f"Fence renderer for {lang} failed, falling back: {e}")
                return plain_code_block(code, lang)

        try:
            lexer = get_lexer_by_name(lang)
            return highlight(code, lexer, self.formatter)
        except ClassNotFound:
            return plain_code_block(code, lang)
        except Exception as e:
            logger.warning(f"Highlighting {lang} failed, falling back: {e}")
            return plain_code_block(code, lang)


class MarkdownRenderer:
    def __init__(self, fence_renderers: Optional[Dict[str, FenceRenderer]] = None):
        self.fence_renderers = dict(DEFAULT_FENCE_RENDERERS)
        if fence_renderers:
            self.fence_renderers.update(fence_renderers)
        self._markdown = mistune.create_markdown(
            renderer=HighlightRenderer(self.fence_renderers),
            plugins=["table", "strikethrough", "task_lists", "url"],
        )

    def render(self, text: str) -> str:
        try:
            return self._markdown(text)
        except Exception as e:
            raise ParseError("Failed to parse markdown", e) from e


def render_markdown(text: str, renderer: Optional[MarkdownRenderer] = None) -> Result[str]:
    try:
        return ok((renderer or MarkdownRenderer()).render(text))
    except ParseError as e:
        return err(e)
