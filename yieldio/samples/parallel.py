import asyncio
from collections.abc import Callable
from typing import Any

from yieldio import adapt
from yieldio import run

URLS = (
    "https://www.example.com/",
    "https://www.example.org/",
    "https://www.example.net/",
)


def fetch(url: str, callback: Callable[..., Any]):
    """Pretend to fetch a page, calling back with its body."""
    loop = asyncio.get_running_loop()
    loop.call_later(len(url) / 1000, callback, None, f"<html>{url}</html>")


request = adapt(fetch)


def total_size():
    r1 = request(URLS[0])
    r2 = request(URLS[1])
    r3 = request(URLS[2])
    pages = yield [r1, r2, r3]
    return sum(len(page) for page in pages)


def mapped_size():
    pages = yield [request(url) for url in URLS]
    return sum(map(len, pages))


if __name__ == "__main__":
    print(run(total_size), "bytes")
    print(run(mapped_size), "bytes")
