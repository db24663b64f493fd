"""Put a profile into a class (or take it out with --none).

Class affiliation is not editable from the portal itself.
"""
from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from dotenv import load_dotenv

from config import get_settings_module

from src.class_portal.class_portal.container import build_container
from src.class_portal.class_portal.core.exceptions import DomainError


def main() -> int:
    load_dotenv(override=False)
    parser = argparse.ArgumentParser(description=__doc__)
    parser.add_argument("email", help="email of the account")
    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument("--class-name", help="e.g. 'Class A'")
    group.add_argument("--none", action="store_true", help="remove the class affiliation")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=dict(settings.DB_CONFIG))

    identity = container.identities_repo.get_by_email(args.email.strip().lower())
    if not identity:
        print(f"ERROR: no account for {args.email}", file=sys.stderr)
        return 1

    class_id = None
    if not args.none:
        school_class = container.classes_repo.get_by_name(args.class_name)
        if not school_class:
            print(f"ERROR: no class named {args.class_name!r}", file=sys.stderr)
            return 1
        class_id = school_class.id

    try:
        profile = container.provisioning.assign_class(identity.id, class_id)
    except DomainError as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    print(f"OK: {profile.name} ({profile.role.value}) -> {args.class_name if class_id else 'no class'}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
