import argparse
import asyncio
import logging

from craft_server.crud import CreateData
from craft_server.db import Session, engine
from craft_server.services.recipe_db import read_all_elements, seed_starting_elements

logging.basicConfig(level=logging.INFO)
logging.getLogger("aiosqlite").setLevel(logging.WARNING)


def get_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Seed the starting elements")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Drop every element and recipe before seeding",
    )
    return parser


async def main(reset: bool):
    try:
        if reset:
            await CreateData.drop_table(engine)
        await CreateData.create_table(engine)
        await seed_starting_elements(Session)
        elements = await read_all_elements(Session)
        print(f"Database seeded. Total elements: {len(elements)}")
    finally:
        await engine.dispose()


def run():
    args = get_parser().parse_args()
    asyncio.run(main(args.reset))


if __name__ == "__main__":
    run()
