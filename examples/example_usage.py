"""Example: drive the service layer directly (no Flask).

Controllers stay thin; the use cases live in the services built by the container.
"""

import importlib

from dotenv import load_dotenv

from config import get_settings_module

from src.workforce_hub.workforce_hub.container import build_container


def main():
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG, settings=settings)

    user = container.auth_service.authenticate(email="owner@demo.local", password="demo1234")
    for org in container.organization_service.list_my_organizations(user.user_id):
        print(org.name, org.role.value)
        page = container.attendance_history_service.history(org.org_id, user_id=user.user_id, filter_name="all")
        for group in page.groups:
            print(" ", group.local_date, group.stats)


if __name__ == "__main__":
    main()
