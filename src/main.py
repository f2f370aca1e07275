from src.app import AppSettings, run_report

__all__ = ["main"]


def main() -> None:
    """Entry point for the application."""
    settings = AppSettings.from_env()
    run_report(settings, owner_id=settings.report_owner_id)


if __name__ == "__main__":
    main()
