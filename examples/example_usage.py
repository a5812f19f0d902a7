"""Example: the overtime calculator on its own, without Flask or the backend."""

from datetime import date

from src.ot_dashboard.ot_dashboard.overtime.calculator import ShiftRules, compute_hours


def main():
    rules = ShiftRules.default()
    holidays = frozenset({date(2025, 1, 1)})

    print("weekday   ", compute_hours("08:30", "20:10", "8:30am", date(2025, 3, 3), holidays, rules))
    print("saturday  ", compute_hours("06:30", "15:00", "6:30am", date(2025, 3, 8), holidays, rules))
    print("sunday    ", compute_hours("22:00", "02:00", "8:30am", date(2025, 3, 9), holidays, rules))
    print("triple OT ", compute_hours("08:00", "12:00", "8:30am", date(2025, 1, 1), holidays, rules))


if __name__ == "__main__":
    main()
