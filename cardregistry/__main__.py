from os import environ

from uvicorn import run

from cardregistry.log import configure_logging


def main() -> None:
    configure_logging()
    # one worker only: uniqueness is enforced by the in-process cache
    run(
        "cardregistry.app:app_factory",
        host=environ.get("HOST", "0.0.0.0"),
        port=int(environ.get("PORT", 8000)),
        factory=True,
    )


if __name__ == "__main__":
    main()
