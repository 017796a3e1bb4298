"""
Async Dispatch, Logging and Environment Configuration Examples.

Demonstrates AsyncTransport inside asyncio, structured logging and
loading DispatchConfig from HTTP_DISPATCH_* environment variables.
"""

import asyncio
import sys
import os

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))

from src.http_dispatch import DispatchConfig, LoggingConfig, RequestDispatcher, load_from_env


async def example_1_async_dispatch():
    """Example 1: dispatch() inside a running loop picks AsyncTransport."""
    print("\n" + "="*60)
    print("EXAMPLE 1: Async dispatch")
    print("="*60 + "\n")

    with RequestDispatcher() as dispatcher:
        handles = [
            dispatcher.dispatch({
                "method": "GET",
                "url": f"https://jsonplaceholder.typicode.com/posts/{post_id}",
                "on_success": lambda post: print(f"#{post['id']}: {post['title']}"),
            })
            for post_id in (1, 2, 3)
        ]
        await asyncio.gather(*(handle.wait() for handle in handles))


def example_2_json_logging():
    """Example 2: JSON logs with correlation id; passwords are masked."""
    print("\n" + "="*60)
    print("EXAMPLE 2: Structured logging")
    print("="*60 + "\n")

    config = DispatchConfig.create(
        transport="thread",
        logging=LoggingConfig.create(level="DEBUG", format="json"),
    )
    with RequestDispatcher(config) as dispatcher:
        handle = dispatcher.dispatch({
            "method": "GET",
            "url": "https://httpbin.org/basic-auth/alice/s3cret",
            "credentials": {"username": "alice", "password": "s3cret"},
            "on_success": lambda body: print(f"Authenticated: {body}"),
        })
        handle.wait(10)


def example_3_environment():
    """Example 3: Load configuration from environment."""
    print("\n" + "="*60)
    print("EXAMPLE 3: Environment configuration")
    print("="*60 + "\n")

    os.environ["HTTP_DISPATCH_TRANSPORT"] = "thread"
    os.environ["HTTP_DISPATCH_TIMEOUT_READ"] = "15"

    config = load_from_env(enforce_https=False)
    print(f"transport={config.transport} read_timeout={config.timeout.read} "
          f"enforce_https={config.enforce_https}")


if __name__ == "__main__":
    asyncio.run(example_1_async_dispatch())
    example_2_json_logging()
    example_3_environment()
