"""CLI menu entrypoint and shared flows."""

from __future__ import annotations

from pathlib import Path

from wells_scraper.configs.settings import app_config
from wells_scraper.ui.registry import available_scrapers, select_scraper
from wells_scraper.ui.runner import run_scraper
from wells_scraper.ui.utils import (
    BOLD,
    CYAN,
    RED,
    RESET,
    convert_json_folder_to_csv,
    prompt_for_model,
    setup_file_logging,
)


def print_banner() -> None:
    banner = f"""
{BOLD}{CYAN}===================================
   Well & Permit Records Scraper
==================================={RESET}
"""
    print(banner)


def prompt_menu() -> str:
    print("1. Scrape records")
    print("2. Convert stored records to CSV")
    print("3. Exit")
    return input(f"\n{BOLD}Select an option [1-3]: {RESET}").strip()


def main() -> None:
    log_file = Path(__file__).resolve().parents[1] / "logs.txt"
    setup_file_logging(log_file)
    while True:
        print_banner()
        print()
        choice = prompt_menu()
        print()

        if choice == "1":
            keys = ", ".join(f"{region}/{source}" for region, source in available_scrapers())
            print(f"Available scrapers: {keys}")
            region = input("Enter region/state code (e.g., ok): ").strip()
            source = input("Enter source (e.g., well_records): ").strip()
            try:
                scraper = select_scraper(region, source)
            except ValueError as e:
                print(f"{RED}{e}{RESET}")
                continue
            schema = scraper.__class__.get_input_schema()
            try:
                inputs = prompt_for_model(schema)
            except ValueError as e:
                print(f"{RED}Invalid input: {e}{RESET}")
                continue
            print(f"\n{BOLD}Running {region}/{source} scraper...{RESET}")
            run_scraper(scraper, inputs)
            input(f"\n{BOLD}Press Enter to return to menu...{RESET}")
            continue

        if choice == "2":
            default_folder = Path(app_config.DATA_DIR) / "records"
            folder_str = input(f"Enter path to a records folder (e.g., {default_folder / 'oklahoma_well_records'}): ").strip()
            out_csv_str = input("Enter output CSV file path (e.g., output.csv): ").strip()
            folder = Path(folder_str).expanduser().resolve()
            out_csv = Path(out_csv_str).expanduser().resolve()
            try:
                count = convert_json_folder_to_csv(folder, out_csv)
                print(f"Converted {count} JSON files into: {BOLD}{out_csv}{RESET}")
            except (FileNotFoundError, OSError) as e:
                print(f"{RED}Conversion failed: {e}{RESET}")
            input(f"\n{BOLD}Press Enter to return to menu...{RESET}")
            continue

        if choice == "3":
            print("Goodbye!")
            break

        print(f"{RED}Invalid option. Please select 1, 2, or 3.{RESET}\n")
