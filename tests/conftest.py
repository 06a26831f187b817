"""Shared test fixtures."""

import pytest
from httpx import ASGITransport, AsyncClient

from dialogue_forge import import_yarn


@pytest.fixture
async def client():
    """Async HTTP test client against the app."""
    from dialogue_forge.main import app

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
def merchant_script():
    return (
        "title: shop\n"
        "---\n"
        "Merchant: Welcome!\n"
        "<<if $gold >= 100>>\n"
        "    Merchant: You can afford the sword.\n"
        "<<else>>\n"
        "    Merchant: Come back with more gold.\n"
        "    <<jump leave>>\n"
        "<<endif>>\n"
        "<<jump counter>>\n"
        "===\n"
        "\n"
        "title: counter\n"
        "---\n"
        "Merchant: What will it be?\n"
        "<<if $gold >= 100>>\n"
        "-> Buy the sword\n"
        "    <<set $has_sword = true>>\n"
        "    <<set $gold -= 100>>\n"
        "    <<jump leave>>\n"
        "<<endif>>\n"
        "-> Nothing\n"
        "    <<jump leave>>\n"
        "===\n"
        "\n"
        "title: leave\n"
        "---\n"
        "Merchant: Farewell.\n"
        "===\n"
    )


@pytest.fixture
def merchant_tree(merchant_script):
    return import_yarn(merchant_script, title="Merchant").tree
