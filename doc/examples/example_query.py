# doc/examples/example_query.py

import asyncio
import logging

from tw_nhi_icc import TWNHIICCService, NetworkError, TimeoutError, ResponseError

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(levelname)s - %(name)s - %(message)s"
)
logger = logging.getLogger("QueryExample")

# --- Configuration ---
URL_PREFIX = "http://127.0.0.1:12345"


async def main():
    """Prints the service version and the cards currently inserted."""
    service = TWNHIICCService(URL_PREFIX)

    try:
        version = await service.get_version()
        logger.info(f"TW NHI IC Card Service version: {version.text}")

        cards = await service.get_card_list(timeout=5000)
        if not cards:
            logger.info("No NHI card inserted.")
        for card in cards:
            logger.info(
                f"[{card.reader_name}] {card.full_name} ({card.sex}), ID: {card.id_no}, "
                f"card: {card.card_no}, born {card.birthday.date()}, issued {card.issue_date.date()}"
            )

    except TimeoutError as e:
        logger.error(f"The service did not answer in time: {e}")
    except NetworkError as e:
        logger.error(f"Cannot reach the service at {URL_PREFIX}: {e}")
    except ResponseError as e:
        logger.error(f"The service answered with an error: {e}")


if __name__ == "__main__":
    asyncio.run(main())
