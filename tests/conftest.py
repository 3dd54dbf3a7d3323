"""Shared pytest fixtures."""

from __future__ import annotations

import pytest

from draftling.model import ContentState
from tests.helpers import make_content, span


@pytest.fixture
def hello_content() -> tuple[ContentState, str]:
    """Block ``b1`` reading "hello" with a mutable link on index 2."""

    content = make_content("hello")
    content, link = content.create_entity("LINK", "MUTABLE", {"url": "https://example.com"})
    content = content.apply_entity(span("b1", 2, 3), link)
    return content, link
