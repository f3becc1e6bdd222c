#!/usr/bin/env python3
"""
Force Shortlist Script
======================
Ends the shortlist window of an online job now and computes its shortlist,
instead of waiting for the background scheduler.

A job whose shortlist was already computed is left untouched.

Usage:
    python scripts/force_shortlist.py <job_id>
    python scripts/force_shortlist.py --tick   # run one full scheduler pass
"""

import argparse
import os
import sys

from dotenv import load_dotenv

# Add parent directory to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from gigmarket.core.logging import setup_logging
from gigmarket.db.session import SyncSessionLocal
from gigmarket.services.shortlist_scheduler import ShortlistScheduler

load_dotenv()


def force_shortlist(job_id: str) -> int:
    scheduler = ShortlistScheduler(SyncSessionLocal)
    winners = scheduler.force_shortlist(job_id)
    if winners is None:
        print(f"⚠️  Shortlist for job {job_id} was already computed - nothing to do")
        return 0

    print(f"✅ Shortlisted {len(winners)} applications for job {job_id}:")
    for application in winners:
        print(f"   • {application.student_id}  score={application.evaluation_score}  applied={application.created_at}")
    return len(winners)


def run_tick() -> dict:
    stats = ShortlistScheduler(SyncSessionLocal).run_once()
    print("\n📊 Shortlist pass:")
    for key, value in stats.items():
        print(f"   {key}: {value}")
    return stats


if __name__ == '__main__':
    parser = argparse.ArgumentParser(description='Compute the shortlist of an online job now')
    parser.add_argument('job_id', nargs='?', help='Job id')
    parser.add_argument('--tick', action='store_true', help='Run one full auto-close + shortlist pass')

    args = parser.parse_args()
    setup_logging()

    if args.tick:
        run_tick()
    elif args.job_id:
        try:
            force_shortlist(args.job_id)
        except Exception as e:
            print(f"❌ Error computing shortlist: {str(e)}")
            sys.exit(1)
    else:
        parser.print_help()
        sys.exit(2)
