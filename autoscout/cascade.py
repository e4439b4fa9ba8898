"""
Selector cascades: ordered groups of equivalent CSS selectors per logical field.
"""
import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional, Sequence

from .models import CascadeResult, SelectorGroup
from .utils import clean_text

logger = logging.getLogger(__name__)


# Values of every element matching a CSS selector list.
# "text" reads textContent, anything else is read as a property then as an attribute.
QUERY_SCRIPT = """
([selector, attribute]) => Array.from(document.querySelectorAll(selector)).map((el) => {
  const raw = attribute === 'text' ? el.textContent : (el[attribute] || el.getAttribute(attribute));
  return (raw || '').trim();
})
"""

ELEMENT_EXISTS_SCRIPT = "(selector) => document.querySelector(selector) !== null"

CURRENT_URL_SCRIPT = "() => window.location.href"


async def query_group(context, group: SelectorGroup, script: str = QUERY_SCRIPT, extra: Any = "text") -> list:
    """Evaluate one selector group in the page; the script receives [selector_list, extra]."""
    values = await context.evaluate(script, [", ".join(group), extra])
    return list(values or [])


async def resolve(
    context,
    groups: Sequence[SelectorGroup],
    script: str = QUERY_SCRIPT,
    extra: Any = "text",
    accept: Optional[Callable[[Any], bool]] = None,
) -> CascadeResult:
    """
    Return the values of the first group that yields at least one element.

    Groups are tried in declared order and later groups are never queried once
    one matches. When `accept` is given, elements it rejects do not count as a
    match. A total miss returns an empty CascadeResult instead of raising.
    """
    for index, group in enumerate(groups):
        values = await query_group(context, group, script, extra)
        if accept is not None:
            values = [v for v in values if accept(v)]
        else:
            values = [v for v in values if v not in ("", None)]
        if values:
            return CascadeResult(values=tuple(values), matched_group_index=index)
    return CascadeResult()


@dataclass(frozen=True)
class FieldSpec:
    """
    Declarative extraction rule for one record field.

    `groups[0]` is the precise selector, later groups are alternates.
    `fallback` receives the page URL when no group matches.
    """

    name: str
    groups: Sequence[SelectorGroup]
    attribute: str = "text"
    accept: Optional[Callable[[str], bool]] = None
    clean: Callable[[str], str] = clean_text
    fallback: Optional[Callable[[str], str]] = None

    async def extract(self, context) -> str:
        result = await resolve(context, self.groups, extra=self.attribute, accept=self.accept)
        if result.matched:
            logger.debug("Field %s matched selector group %d", self.name, result.matched_group_index)
            return self.clean(str(result.value))
        if self.fallback is not None:
            url = await context.evaluate(CURRENT_URL_SCRIPT)
            return self.fallback(url or "")
        return ""
