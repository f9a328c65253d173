#!/usr/bin/env python3
"""
Command-line script to run the business-days backfill once.

Usage:
    python -m talentflow.scripts.backfill_business_days [--env ENV]

Options:
    --env ENV    Environment to load (local, sandbox, production). Defaults to
                 FLASK_ENV / ENVIRONMENT.
"""

import argparse
import os
import sys


def main():
    parser = argparse.ArgumentParser(
        description='Fill business_days_elapsed for completed vacancies that have no value yet'
    )
    parser.add_argument(
        '--env',
        type=str,
        help='Environment to load (local, sandbox, production)'
    )
    args = parser.parse_args()

    if args.env:
        os.environ['ENVIRONMENT'] = args.env
        os.environ.pop('FLASK_ENV', None)

    from talentflow import create_app
    from talentflow.config import get_config
    from talentflow.jobs.backfill import backfill_business_days_elapsed

    config_class = get_config()
    # A one-shot run never starts the background scheduler
    config_class.SCHEDULER_ENABLED = False
    app = create_app(config_class)

    with app.app_context():
        try:
            result = backfill_business_days_elapsed()
        except Exception as e:
            print(f"Error running backfill: {e}")
            sys.exit(1)

    print(f"Updated {result['updated']} of {result['total']} completed vacancies")


if __name__ == '__main__':
    main()
