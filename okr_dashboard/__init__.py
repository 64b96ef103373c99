"""
OKR Dashboard — RAG status and compliance engine

Turns already-fetched records (CSMs, customers, score submissions,
objective trees) into RAG health classifications and current-period
compliance state for the dashboard front end.

To swap the Excel export for a live feed:
    Replace the loader functions in okr_dashboard.loaders with queries
    that return the same Owner, Entity and SubmissionRecord records.
    Nothing downstream reads files or the clock.

To connect a front end:
    Call dashboard.get_owner_compliance_card(owners, customers, scores, now)
    and friends to get plain dicts for cards, badges and tables.

To change RAG thresholds or the deadline:
    Edit the constants in config; rollups reuse the same thresholds.
"""
