"""
Application entry point.

Starts the interactive console menu used to run the portal scrapers and to
export stored records.
"""

from wells_scraper.ui.menu import main as menu_main


def main() -> None:
    """
    Start the interactive scraper menu.

    Examples
    --------
    >>> main()  # doctest: +SKIP
    """
    menu_main()


if __name__ == "__main__":
    main()
