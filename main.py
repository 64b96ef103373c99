"""
OKR Dashboard — End-to-end status pipeline.

Loads the dashboard export workbook if present (otherwise simulated data),
computes compliance and RAG outputs, and prints smoke-test summaries.

Usage:
    python main.py
"""

import logging
from datetime import datetime

import pandas as pd

from okr_dashboard.compliance import calc_owner_compliance
from okr_dashboard.config import WORKBOOK_FILE
from okr_dashboard.dashboard import (
    get_compliance_report,
    get_managed_services_card,
    get_objective_health,
    get_owner_compliance_card,
)
from okr_dashboard.loaders import load_workbook_records
from okr_dashboard.periods import reporting_period
from okr_dashboard.reminders import (
    build_admin_alerts,
    build_compliance_log_entry,
    build_owner_reminders,
)
from okr_dashboard.simulator import (
    generate_entities,
    generate_expected_counts,
    generate_objective_tree,
    generate_owners,
    generate_submissions,
)

# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(name)s | %(levelname)s | %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


def main() -> None:
    """Run the full status pipeline and print smoke-test outputs."""

    now = datetime.now()

    print("=" * 70)
    print("  OKR DASHBOARD — Status & Compliance Engine")
    print("  Pipeline Smoke Test")
    print("=" * 70)
    print()

    # ------------------------------------------------------------------
    # 1. Load source data
    # ------------------------------------------------------------------
    print("[ 1 ] LOADING SOURCE DATA")
    print("-" * 40)

    if WORKBOOK_FILE.exists():
        owners, customers, scores = load_workbook_records(str(WORKBOOK_FILE))
        print(f"\nLoaded export workbook: {WORKBOOK_FILE.name}")
    else:
        logger.warning("No export at %s — using simulated data", WORKBOOK_FILE)
        owners = generate_owners()
        customers = generate_entities()
        scores = generate_submissions(customers, now)

    print(f"\nOwners: {len(owners)}  Customers: {len(customers)}  Scores: {len(scores)}")

    # ------------------------------------------------------------------
    # 2. Compliance cards
    # ------------------------------------------------------------------
    print("\n")
    print("[ 2 ] COMPLIANCE")
    print("-" * 40)

    card = get_owner_compliance_card(owners, customers, scores, now)
    print(f"\nCSM check-in — {card['period']} ({card['outcome']})")
    if card["total"]:
        print(f"  {card['submitted']}/{card['total']} submitted ({card['compliance_pct']}%)")
        print(f"  Updated:     {', '.join(card['compliant']) or '-'}")
        print(f"  Not updated: {', '.join(card['non_compliant']) or '-'}")
    print(f"  Deadline: {card['deadline_label']}")
    print(f"  Invalid period keys: {card['invalid_period_keys']}")

    ms_card = get_managed_services_card(customers, scores, now)
    print(f"\nManaged services — {ms_card['period']} ({ms_card['outcome']})")
    if ms_card["total"]:
        print(f"  {ms_card['scored_count']}/{ms_card['total']} scored ({ms_card['pct']}%)")
        pending = ms_card["pending"]
        more = f" +{pending['more']} more" if pending["more"] else ""
        print(f"  Not scored: {', '.join(pending['shown']) or '-'}{more}")

    expected = generate_expected_counts(customers)
    report = get_compliance_report(owners, customers, scores, now, expected)
    stats = report["stats"]
    print(
        f"\nCompliance report: {stats['completed_customers']}/{stats['total_customers']} "
        f"customers ({stats['completion_pct']}%)"
    )
    if not report["rows"].empty:
        with pd.option_context("display.width", 140):
            print(report["rows"][
                ["customer_name", "owner_name", "scores_this_period",
                 "total_expected", "status", "current_avg", "trend"]
            ].to_string(index=False))

    all_time = get_compliance_report(owners, customers, scores, now, expected, all_time=True)
    print(f"All time: {all_time['stats']['completion_pct']}% of customers have ever submitted")

    # ------------------------------------------------------------------
    # 3. Reminders
    # ------------------------------------------------------------------
    print("\n")
    print("[ 3 ] REMINDERS")
    print("-" * 40)

    result = calc_owner_compliance(owners, customers, scores, reporting_period(now))
    alerts = build_admin_alerts(result, ["admin-1"], total_owners=len(owners))
    reminders = build_owner_reminders(result)
    log_entry = build_compliance_log_entry(result, total_owners=len(owners))
    print(f"\nAdmin alerts: {len(alerts)}  Owner reminders: {len(reminders)}")
    for alert in alerts:
        print(f"  {alert['message']}")
    print(f"  Log: {log_entry['new_value']}")

    # ------------------------------------------------------------------
    # 4. Objective health
    # ------------------------------------------------------------------
    print("\n")
    print("[ 4 ] OBJECTIVE HEALTH")
    print("-" * 40)

    health = get_objective_health(generate_objective_tree())
    score = "n/a" if health["score"] is None else f"{health['score']:.1f}"
    print(f"\n{health['name']}: {score} — {health['label']}")
    table = health["table"]
    table = table.assign(name=table["depth"].map(lambda d: "  " * d) + table["name"])
    print(table[["name", "level", "formula", "score", "label"]].to_string(index=False))

    print("\n" + "=" * 70)
    print("  Pipeline complete.")
    print("=" * 70)


if __name__ == "__main__":
    main()
