# tests/conftest.py - Pytest configuration and fixtures

import asyncio
import sys
from pathlib import Path

import pytest
import pytest_asyncio
from aioresponses import aioresponses

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqliradar.utils.error_handler import get_global_error_handler
from tests.factories import BaselineFactory, FakeSession, ParameterInfoFactory, PostParameterFactory


@pytest.fixture
def mocked():
    """Intercept every aiohttp request made during the test."""
    with aioresponses() as m:
        yield m


@pytest.fixture
def login_form_html():
    """Page holding a two-field POST login form."""
    return """
    <html>
    <head><title>Login</title></head>
    <body>
        <form method="POST" action="/login">
            <input name="user">
            <input name="pass">
        </form>
    </body>
    </html>
    """


@pytest.fixture
def sample_html():
    """Page with links, a GET search form and a POST login form."""
    return """
    <!DOCTYPE html>
    <html>
    <head>
        <title>Test Page</title>
        <link rel="stylesheet" href="/static/site.css">
    </head>
    <body>
        <h1>Test Page</h1>
        <form action="/search">
            <input type="text" name="q" value="shoes">
            <select name="sort">
                <option value="asc">Ascending</option>
                <option value="desc" selected>Descending</option>
            </select>
        </form>
        <form action="/submit" method="post">
            <input type="text" name="username" value="">
            <input type="password" name="password" value="">
            <input type="hidden" name="csrf_token" value="abc123">
            <textarea name="comment">hi</textarea>
            <input type="submit" value="Login">
        </form>
        <a href="/page1">Page 1</a>
        <a href="/page2#reviews">Page 2</a>
        <a href="#top">Top</a>
        <a href="https://other.test/away">Elsewhere</a>
        <a href="/files/report.pdf">Report</a>
        <a href="mailto:admin@ex.test">Mail</a>
    </body>
    </html>
    """


@pytest.fixture(autouse=True)
def reset_error_counts():
    """Start every test with empty error counters."""
    handler = get_global_error_handler()
    handler.reset_counts()
    yield
    handler.reset_counts()


# FACTORY-BASED TEST DATA FIXTURES

@pytest.fixture
def parameter_factory():
    """Provide GET parameter factory."""
    return ParameterInfoFactory


@pytest.fixture
def post_parameter_factory():
    """Provide POST parameter factory."""
    return PostParameterFactory


@pytest.fixture
def baseline_factory():
    """Provide baseline factory."""
    return BaselineFactory


@pytest.fixture
def fake_session():
    """Session returning the default page for every request."""
    return FakeSession()


@pytest_asyncio.fixture
async def listener():
    """TCP server on an ephemeral local port; yields the port."""
    async def handle(reader, writer):
        writer.close()

    server = await asyncio.start_server(handle, "127.0.0.1", 0)
    yield server.sockets[0].getsockname()[1]
    server.close()
    await server.wait_closed()
