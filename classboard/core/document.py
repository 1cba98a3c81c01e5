"""
Document model - Pages, active page pointer and element edits

A WhiteboardDocument is an immutable value. Every operation returns a new
document, or the very same object when the request is a no-op (deleting
the last page, switching to an unknown page, duplicate ids...), so callers
can test ``new is old`` to detect that nothing changed.

Operations can be called directly or through command objects:

    document = apply(document, AddPage())
    document = apply(document, AddElement(rect))
"""

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, List, Optional, Tuple, Union

from ..config import Config
from .elements import (
    Element, PageElement, ElementValidationError,
    is_page_element, element_to_dict, element_from_dict,
)
from .options import DrawingOptions

logger = logging.getLogger(__name__)

FORMAT_VERSION = "1.0"


class DocumentError(ValueError):
    """Raised when a document is constructed or loaded in an invalid state."""


# ==================== Data ====================

@dataclass(frozen=True)
class Page:
    id: str
    display_name: str
    background_color: str = Config.DEFAULT_BACKGROUND
    elements: Tuple[PageElement, ...] = ()

    def __post_init__(self):
        elements = tuple(self.elements)
        for element in elements:
            if not is_page_element(element):
                raise DocumentError(f"{type(element).__name__} cannot be stored on page {self.id}")
        ids = [element.id for element in elements]
        if len(set(ids)) != len(ids):
            raise DocumentError(f"Duplicate element ids on page {self.id}")
        object.__setattr__(self, 'elements', elements)

    def find_element(self, element_id: str) -> Optional[PageElement]:
        for element in self.elements:
            if element.id == element_id:
                return element
        return None

    @property
    def element_ids(self) -> List[str]:
        return [element.id for element in self.elements]


@dataclass(frozen=True)
class WhiteboardDocument:
    pages: Tuple[Page, ...]
    active_page_id: str
    options: DrawingOptions = field(default_factory=DrawingOptions)

    def __post_init__(self):
        pages = tuple(self.pages)
        if not pages:
            raise DocumentError("A document needs at least one page")
        ids = [page.id for page in pages]
        if len(set(ids)) != len(ids):
            raise DocumentError(f"Duplicate page ids: {ids}")
        if self.active_page_id not in ids:
            raise DocumentError(f"Active page {self.active_page_id!r} is not in the document")
        object.__setattr__(self, 'pages', pages)

    @property
    def active_page(self) -> Page:
        return find_page(self, self.active_page_id)

    @property
    def page_ids(self) -> List[str]:
        return [page.id for page in self.pages]


def new_document(options: Optional[DrawingOptions] = None) -> WhiteboardDocument:
    """Create a document with a single blank page."""
    page = Page(id='page-1', display_name='Page 1')
    return WhiteboardDocument(
        pages=(page,),
        active_page_id=page.id,
        options=options or DrawingOptions(),
    )


def find_page(document: WhiteboardDocument, page_id: str) -> Optional[Page]:
    for page in document.pages:
        if page.id == page_id:
            return page
    return None


def active_page(document: WhiteboardDocument) -> Page:
    return document.active_page


def _replace_page(document: WhiteboardDocument, page: Page) -> WhiteboardDocument:
    pages = tuple(page if p.id == page.id else p for p in document.pages)
    return replace(document, pages=pages)


def _next_page_number(document: WhiteboardDocument) -> int:
    taken = set(document.page_ids)
    number = len(document.pages) + 1
    while f'page-{number}' in taken:
        number += 1
    return number


# ==================== Page Operations ====================

def add_page(document: WhiteboardDocument, background: str = Config.DEFAULT_BACKGROUND) -> WhiteboardDocument:
    """Append a blank page and make it active."""
    number = _next_page_number(document)
    page = Page(id=f'page-{number}', display_name=f'Page {number}', background_color=background)
    logger.debug(f"Adding page {page.id}")
    return replace(document, pages=document.pages + (page,), active_page_id=page.id)


def delete_page(document: WhiteboardDocument, page_id: str) -> WhiteboardDocument:
    """
    Remove a page.

    No-op when it is the only page or the id is unknown. When the active page
    is removed the first remaining page becomes active.
    """
    if len(document.pages) <= 1:
        logger.debug("Refusing to delete the only page")
        return document
    if find_page(document, page_id) is None:
        logger.debug(f"Cannot delete unknown page {page_id}")
        return document

    pages = tuple(page for page in document.pages if page.id != page_id)
    active_id = document.active_page_id
    if active_id == page_id:
        active_id = pages[0].id
    return replace(document, pages=pages, active_page_id=active_id)


def switch_page(document: WhiteboardDocument, page_id: str) -> WhiteboardDocument:
    if page_id == document.active_page_id:
        return document
    if find_page(document, page_id) is None:
        logger.debug(f"Cannot switch to unknown page {page_id}")
        return document
    return replace(document, active_page_id=page_id)


def clear_page(document: WhiteboardDocument) -> WhiteboardDocument:
    """Remove every element from the active page."""
    page = document.active_page
    if not page.elements:
        return document
    return _replace_page(document, replace(page, elements=()))


def rename_page(document: WhiteboardDocument, page_id: str, name: str) -> WhiteboardDocument:
    page = find_page(document, page_id)
    name = (name or '').strip()
    if page is None or not name or name == page.display_name:
        return document
    return _replace_page(document, replace(page, display_name=name))


def set_page_background(document: WhiteboardDocument, page_id: str, color: str) -> WhiteboardDocument:
    page = find_page(document, page_id)
    if page is None or not color or color == page.background_color:
        return document
    return _replace_page(document, replace(page, background_color=color))


# ==================== Element Operations ====================

def add_element(document: WhiteboardDocument, element: Element) -> WhiteboardDocument:
    """Append an element to the active page (LaserMark and duplicate ids are rejected)."""
    if not is_page_element(element):
        logger.warning(f"Refusing to store {type(element).__name__} on a page")
        return document

    page = document.active_page
    if page.find_element(element.id) is not None:
        logger.warning(f"Element id {element.id} already exists on {page.id}")
        return document

    return _replace_page(document, replace(page, elements=page.elements + (element,)))


def update_element(document: WhiteboardDocument, element_id: str, **changes: Any) -> WhiteboardDocument:
    """
    Change fields of an element on the active page.

    The id and variant are preserved: changing ``id`` or passing fields the
    variant does not have is a no-op, as are changes that fail validation.
    """
    page = document.active_page
    element = page.find_element(element_id)
    if element is None:
        logger.debug(f"Cannot update unknown element {element_id}")
        return document
    if not changes:
        return document
    if 'id' in changes:
        logger.warning("Element ids cannot be changed; delete and re-add instead")
        return document

    names = {f.name for f in fields(element)}
    unknown = set(changes) - names
    if unknown:
        logger.warning(f"{element.kind} has no fields {sorted(unknown)}")
        return document

    try:
        updated = replace(element, **changes)
    except (ElementValidationError, TypeError) as e:
        logger.warning(f"Rejected update to {element_id}: {e}")
        return document

    elements = tuple(updated if e.id == element_id else e for e in page.elements)
    return _replace_page(document, replace(page, elements=elements))


def delete_element(document: WhiteboardDocument, element_id: str) -> WhiteboardDocument:
    page = document.active_page
    if page.find_element(element_id) is None:
        logger.debug(f"Cannot delete unknown element {element_id}")
        return document
    elements = tuple(e for e in page.elements if e.id != element_id)
    return _replace_page(document, replace(page, elements=elements))


def change_options(document: WhiteboardDocument, **changes: Any) -> WhiteboardDocument:
    """Merge drawing option changes (tool, colours, sizes)."""
    options = document.options.merged(**changes)
    if options == document.options:
        return document
    return replace(document, options=options)


# ==================== Commands ====================

@dataclass(frozen=True)
class AddPage:
    background: str = Config.DEFAULT_BACKGROUND


@dataclass(frozen=True)
class DeletePage:
    page_id: str


@dataclass(frozen=True)
class SwitchPage:
    page_id: str


@dataclass(frozen=True)
class ClearPage:
    pass


@dataclass(frozen=True)
class RenamePage:
    page_id: str
    name: str


@dataclass(frozen=True)
class SetPageBackground:
    page_id: str
    color: str


@dataclass(frozen=True)
class AddElement:
    element: Element


@dataclass(frozen=True)
class UpdateElement:
    element_id: str
    changes: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DeleteElement:
    element_id: str


@dataclass(frozen=True)
class ChangeOptions:
    changes: Dict[str, Any] = field(default_factory=dict)


Command = Union[AddPage, DeletePage, SwitchPage, ClearPage, RenamePage,
                SetPageBackground, AddElement, UpdateElement, DeleteElement,
                ChangeOptions]


def apply(document: WhiteboardDocument, command: Command) -> WhiteboardDocument:
    """
    Apply a command and return the resulting document.

    Raises:
        TypeError: If ``command`` is not a known command object
    """
    if isinstance(command, AddPage):
        return add_page(document, command.background)
    if isinstance(command, DeletePage):
        return delete_page(document, command.page_id)
    if isinstance(command, SwitchPage):
        return switch_page(document, command.page_id)
    if isinstance(command, ClearPage):
        return clear_page(document)
    if isinstance(command, RenamePage):
        return rename_page(document, command.page_id, command.name)
    if isinstance(command, SetPageBackground):
        return set_page_background(document, command.page_id, command.color)
    if isinstance(command, AddElement):
        return add_element(document, command.element)
    if isinstance(command, UpdateElement):
        return update_element(document, command.element_id, **command.changes)
    if isinstance(command, DeleteElement):
        return delete_element(document, command.element_id)
    if isinstance(command, ChangeOptions):
        return change_options(document, **command.changes)
    raise TypeError(f"Unknown command: {command!r}")


# ==================== Serialization ====================

def page_to_dict(page: Page) -> Dict[str, Any]:
    return {
        'id': page.id,
        'display_name': page.display_name,
        'background_color': page.background_color,
        'elements': [element_to_dict(element) for element in page.elements],
    }


def page_from_dict(data: Dict[str, Any]) -> Page:
    try:
        elements = tuple(element_from_dict(item) for item in data.get('elements', []))
        return Page(
            id=data['id'],
            display_name=data.get('display_name', data['id']),
            background_color=data.get('background_color', Config.DEFAULT_BACKGROUND),
            elements=elements,
        )
    except (KeyError, TypeError, AttributeError, ElementValidationError) as e:
        raise DocumentError(f"Invalid page record: {e}") from e


def document_to_dict(document: WhiteboardDocument) -> Dict[str, Any]:
    """Plain structural form: one record per page, one per element."""
    return {
        'format_version': FORMAT_VERSION,
        'active_page_id': document.active_page_id,
        'options': document.options.to_dict(),
        'pages': [page_to_dict(page) for page in document.pages],
    }


def document_from_dict(data: Dict[str, Any]) -> WhiteboardDocument:
    """
    Rebuild a document from document_to_dict output.

    Raises:
        DocumentError: If the record is malformed
    """
    if not isinstance(data, dict):
        raise DocumentError("Document record must be a mapping")
    try:
        pages = tuple(page_from_dict(item) for item in data['pages'])
        options = DrawingOptions.from_dict(data.get('options'))
        active_page_id = data.get('active_page_id') or (pages[0].id if pages else '')
        return WhiteboardDocument(pages=pages, active_page_id=active_page_id, options=options)
    except (KeyError, TypeError) as e:
        raise DocumentError(f"Invalid document record: {e}") from e


__all__ = [
    'FORMAT_VERSION',
    'DocumentError',
    'Page',
    'WhiteboardDocument',
    'new_document',
    'find_page',
    'active_page',
    'add_page',
    'delete_page',
    'switch_page',
    'clear_page',
    'rename_page',
    'set_page_background',
    'add_element',
    'update_element',
    'delete_element',
    'change_options',
    'AddPage',
    'DeletePage',
    'SwitchPage',
    'ClearPage',
    'RenamePage',
    'SetPageBackground',
    'AddElement',
    'UpdateElement',
    'DeleteElement',
    'ChangeOptions',
    'Command',
    'apply',
    'page_to_dict',
    'page_from_dict',
    'document_to_dict',
    'document_from_dict',
]
