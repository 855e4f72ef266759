"""Run the network search HTTP API: ``python -m network_search``."""

from network_search.api.server import main

if __name__ == "__main__":
    main()
