#!/usr/bin/env python3
"""Main entry point for the wingman assistant.

Usage:
    python main.py                               # Interactive chat
    python main.py --query "question"            # Single message
    python main.py --ollama --model llava --extract shot1.png shot2.png
    python main.py --describe-audio clip.mp3     # Gemini only
    python main.py --models                      # List local models
    python main.py --test                        # Connection check
"""

import argparse
import asyncio
import json
import logging

from src.llm import LLMError, LLMSession, create_session

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


def print_json(data) -> None:
    print(json.dumps(data, indent=2, ensure_ascii=False))


async def interactive_mode(session: LLMSession) -> None:
    """Run a chat loop until the user quits."""
    print("\n" + "=" * 60)
    print(f"Wingman ({session.provider}: {session.current_model})")
    print("Commands: /quit, /models, /test, /local [model], /cloud")
    print("=" * 60 + "\n")

    while True:
        try:
            message = (await asyncio.to_thread(input, "> ")).strip()
        except (KeyboardInterrupt, EOFError):
            print()
            break

        if not message:
            continue

        if message.lower() in ("/quit", "/q", "/exit"):
            break

        try:
            if message == "/models":
                for model in await session.list_available_models():
                    print(f"  {model.name}")
            elif message == "/test":
                print_json((await session.test_connection()).to_dict())
            elif message.startswith("/local"):
                model = message[len("/local"):].strip() or None
                await session.switch_to_local(model=model)
                print(f"Using {session.provider}: {session.current_model}")
            elif message == "/cloud":
                await session.switch_to_cloud()
                print(f"Using {session.provider}: {session.current_model}")
            else:
                print(f"\n{await session.chat(message)}\n")
        except LLMError as e:
            logger.error(f"Error handling message: {e}")
            print(f"Error: {e}\n")


async def run(args: argparse.Namespace) -> int:
    session = create_session(
        config_path=args.config,
        use_local=True if args.ollama else None,
        local_model=args.model,
        local_endpoint=args.url,
    )

    async with session:
        if session.is_using_local:
            ready = await session.wait_ready()
            if not ready:
                logger.warning(f"Model {session.current_model} did not confirm; continuing anyway")

        try:
            if args.models:
                for model in await session.list_available_models():
                    print(model.name)
            elif args.test:
                status = await session.test_connection()
                print_json(status.to_dict())
                return 0 if status.success else 1
            elif args.extract:
                problem = await session.extract_structured_from_images(args.extract)
                print_json(problem)
                if args.solve:
                    print_json(await session.generate_solution(problem))
            elif args.describe_image:
                print_json((await session.describe_image(args.describe_image)).to_dict())
            elif args.describe_audio:
                print_json((await session.describe_audio(args.describe_audio)).to_dict())
            elif args.query:
                print(await session.chat(args.query))
            else:
                await interactive_mode(session)
        except LLMError as e:
            logger.error(f"{type(e).__name__}: {e}")
            return 1

    return 0


def main():
    parser = argparse.ArgumentParser(
        description="Wingman: Gemini / Ollama assistant"
    )
    parser.add_argument("--query", "-q", type=str, help="Single message to send")
    parser.add_argument("--extract", nargs="+", metavar="IMAGE", help="Extract a problem from screenshots")
    parser.add_argument("--solve", action="store_true", help="With --extract, also generate a solution")
    parser.add_argument("--describe-image", metavar="PATH", help="Describe an image")
    parser.add_argument("--describe-audio", metavar="PATH", help="Describe an audio clip (Gemini only)")
    parser.add_argument("--models", action="store_true", help="List available Ollama models")
    parser.add_argument("--test", action="store_true", help="Test the backend connection")
    parser.add_argument("--ollama", action="store_true", help="Use the local Ollama backend")
    parser.add_argument("--model", type=str, help="Ollama model name")
    parser.add_argument("--url", type=str, help="Ollama endpoint URL")
    parser.add_argument(
        "--config", "-c",
        type=str,
        default=None,
        help="Path to configuration file",
    )
    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug logging",
    )

    args = parser.parse_args()

    if args.debug:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        return asyncio.run(run(args))
    except LLMError as e:
        logger.error(f"Failed to start: {e}")
        return 1


if __name__ == "__main__":
    exit(main())
