"""Basic client example for the ragchat library.

This example demonstrates how to submit a search to the legal search
service, wait for the result and stream the answer as it is delivered.
"""
import asyncio
import logging

from ragchat import CancellationToken, Client, ClientConfig, RagChatError, RequestConfig

# Configure logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


async def main():
    """Example of a full send_completion round trip."""
    logger.info("=== ragchat Client Example ===")

    # Create client using the builder pattern
    async with (
        Client.builder()
        .base_url("http://localhost:8123")
        .poll_interval_ms(2000)
        .max_poll_attempts(30)
        .build()
    ) as client:
        token = CancellationToken()

        answer = await client.send_completion(
            [
                {"role": "user", "content": "Summarise the limitation period for contract claims"},
            ],
            on_progress=lambda chunk: print(chunk, end="", flush=True),
            cancel_token=token,
        )
        print()
        logger.info("Answer length: %d chars", len(answer))


async def manual_polling():
    """Submit and poll by hand instead of using send_completion."""
    logger.info("=== Manual polling ===")

    config = ClientConfig(base_url="http://localhost:8123", poll_interval_ms=1000)
    async with Client(config, RequestConfig(api_key="local-dev-key")) as client:
        handle = await client.submit("Which courts hear tenancy disputes?")
        logger.info("Submitted task %s", handle.task_id)

        # Non-blocking check first
        result = await handle.try_result()
        if result is None:
            logger.info("Task still running, waiting...")
            result = await handle.wait()

        logger.info("Result: %s", result)


if __name__ == "__main__":
    print("ragchat Client Example")
    print("======================")
    print()
    print("Make sure a search service is running on localhost:8123.")
    print()

    try:
        asyncio.run(main())
        asyncio.run(manual_polling())
    except KeyboardInterrupt:
        print("\nExample interrupted by user")
    except RagChatError as e:
        print(f"\nExample failed: {e}")
