"""Unit tests for Site Companion.

Tests use pytest with asyncio support; HTTP backends are replaced by fakes or served
by aiohttp's in-process test server.
"""
