from loguru import logger

from diagnosis_map.core.tree.loader import default_store


def main() -> None:
    logger.info("Application started")
    store = default_store()
    print(f"Diagnosis tree: {len(store)} nodes, root {store.root_id!r}")
    logger.info("Application finished")


if __name__ == "__main__":
    main()
