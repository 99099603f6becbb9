"""Simple entrypoint: print today's blanketing recommendations for one user."""

import argparse

from barn_app.app import BarnTrackerApp
from logic.errors import WeatherUnavailable


def main() -> None:
    parser = argparse.ArgumentParser(description="Barn tracker blanketing check")
    parser.add_argument("user_id", help="Owner whose horses should be checked")
    args = parser.parse_args()

    app = BarnTrackerApp()
    try:
        alerts = app.blanketing.recommend_for_stable(args.user_id)
    except WeatherUnavailable as exc:
        raise SystemExit(f"Weather unavailable ({exc.reason}); try again later.") from exc
    for alert in alerts:
        print(alert["user_facing_summary"])
    if not alerts:
        print("No horses on file.")


if __name__ == "__main__":
    main()
