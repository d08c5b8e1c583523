"""Simple entrypoint to run the lost & found matcher against the sample reports."""

from evaluation.harness import run_smoke_checks
from lostfound_app.logging_config import configure_logging


def main() -> None:
    configure_logging()
    for line in run_smoke_checks():
        print(line)


if __name__ == "__main__":
    main()
