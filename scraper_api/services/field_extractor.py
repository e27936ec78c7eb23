"""Selector-driven extraction of typed values from a live page."""

from typing import Any, Dict, Iterable, Optional

from playwright.async_api import ElementHandle, Page

from ..core.logging import get_logger
from ..core.postprocessors import apply_postprocessor
from ..models.scrape import FieldDescriptor, FieldKind

logger = get_logger(__name__)


class FieldExtractor:
    """Resolves field descriptors against a page.

    A descriptor never fails the scrape: selector or extraction errors are
    logged and the descriptor resolves to its empty value (``[]`` for
    multiple, ``None`` otherwise).
    """

    async def extract(self, page: Page, descriptor: FieldDescriptor) -> Any:
        """Extract the value of one descriptor."""
        try:
            value = await self._extract(page, descriptor)
        except Exception as e:
            logger.warning(
                "Field extraction failed",
                field=descriptor.name,
                query=descriptor.query,
                error=str(e),
            )
            return descriptor.empty_value

        if descriptor.postprocess:
            value = self._postprocess(descriptor, value)

        return value

    async def extract_all(
        self,
        page: Page,
        descriptors: Iterable[FieldDescriptor],
    ) -> Dict[str, Any]:
        """Extract every descriptor sequentially, in list order."""
        results: Dict[str, Any] = {}
        for descriptor in descriptors:
            results[descriptor.name] = await self.extract(page, descriptor)
        return results

    async def _extract(self, page: Page, descriptor: FieldDescriptor) -> Any:
        elements = await page.query_selector_all(descriptor.query)

        if descriptor.kind == FieldKind.EXISTS:
            return len(elements) > 0

        if descriptor.kind == FieldKind.COUNT:
            return len(elements)

        if not elements:
            return descriptor.empty_value

        if descriptor.multiple:
            return [await self._extract_element_safe(el, descriptor) for el in elements]

        return await self._extract_element(elements[0], descriptor)

    async def _extract_element_safe(
        self,
        element: ElementHandle,
        descriptor: FieldDescriptor,
    ) -> Any:
        try:
            return await self._extract_element(element, descriptor)
        except Exception as e:
            logger.debug(
                "Element extraction failed",
                field=descriptor.name,
                error=str(e),
            )
            return None

    async def _extract_element(
        self,
        element: ElementHandle,
        descriptor: FieldDescriptor,
    ) -> Optional[str]:
        kind = descriptor.kind

        if kind == FieldKind.TEXT:
            text = await element.text_content()
            if text is None:
                return None
            return text.strip() or None

        if kind == FieldKind.INNER_TEXT:
            return await element.inner_text()

        if kind == FieldKind.HTML:
            return await element.inner_html()

        if kind == FieldKind.ATTRIBUTE:
            if not descriptor.attribute:
                return None
            return await element.get_attribute(descriptor.attribute)

        return None

    def _postprocess(self, descriptor: FieldDescriptor, value: Any) -> Any:
        try:
            return apply_postprocessor(descriptor.postprocess, value)
        except Exception as e:
            logger.warning(
                "Post-processing failed, keeping raw value",
                field=descriptor.name,
                postprocess=descriptor.postprocess,
                error=str(e),
            )
            return value
