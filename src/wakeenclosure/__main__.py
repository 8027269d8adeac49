"""Command-line interface."""
from wakeenclosure.main import main

if __name__ == "__main__":
    main()
