"""
Basic Dispatch Usage Examples

Demonstrates declarative GET / POST requests with lifecycle callbacks
from synchronous code (ThreadTransport).
"""

import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.http_dispatch import RequestDispatcher, DispatchConfig


def on_failure(transport):
    print(f"Failed: {transport.error}")


def basic_get_request(dispatcher):
    """Simple GET request."""
    print("\n=== Basic GET Request ===")

    handle = dispatcher.dispatch({
        "method": "get",
        "url": "http://jsonplaceholder.typicode.com/posts/1",  # upgraded to https
        "on_success": lambda post: print(f"Title: {post['title']}"),
        "on_failure": on_failure,
        "on_finished": lambda t: print(f"Status: {t.status}"),
    })
    handle.wait(10)


def post_json_form(dispatcher):
    """POST form fields encoded as JSON."""
    print("\n=== POST with JSON form ===")

    handle = dispatcher.dispatch({
        "method": "POST",
        "url": "https://jsonplaceholder.typicode.com/posts",
        "headers": [{"name": "Content-Type", "value": "application/json"}],
        "form": [("title", "My Post"), ("body", "This is the content"), ("userId", "1")],
        "on_success": lambda created: print(f"Created: {created}"),
        "on_failure": on_failure,
    })
    handle.wait(10)


def progress_and_abort(dispatcher):
    """Progress events and abort()."""
    print("\n=== Progress and abort ===")

    def on_loading(event):
        print(f"Loaded {event.loaded} of {event.total if event.length_computable else '?'} bytes")

    handle = dispatcher.dispatch({
        "method": "GET",
        "url": "https://jsonplaceholder.typicode.com/photos",
        "on_success": lambda photos: print(f"Got {len(photos)} photos"),
        "on_loading": on_loading,
        "on_abort": lambda t: print("Aborted"),
    })
    handle.abort()
    handle.wait(10)


def prepare_only():
    """Inspect the request without sending it."""
    print("\n=== Prepare without sending ===")

    with RequestDispatcher() as dispatcher:
        descriptor = dispatcher.prepare({
            "method": "put",
            "url": "http://example.com/search",
            "consumes": "application/x-www-form-urlencoded",
            "form": [("q", "python http"), ("page", "2")],
            "on_success": print,
        })

    print(f"{descriptor.method} {descriptor.url}")
    for header in descriptor.headers:
        print(f"  {header.name}: {header.value}")
    print(f"  body: {descriptor.body}")


if __name__ == "__main__":
    with RequestDispatcher(DispatchConfig.create(timeout=10, transport="thread")) as dispatcher:
        basic_get_request(dispatcher)
        post_json_form(dispatcher)
        progress_and_abort(dispatcher)
    prepare_only()
