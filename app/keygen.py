"""Print a new field encryption key for FIELD_ENCRYPTION_KEY."""

from app.core.crypto import generate_key


def main() -> None:
    print(generate_key())


if __name__ == "__main__":
    main()
