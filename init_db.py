import asyncio
import logging

from lockbox.db import init_models

if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    # Drop and recreate every table - DEV MODE ONLY
    asyncio.run(init_models(drop_existing=True))
    print(">>> Tables Created Successfully!")
