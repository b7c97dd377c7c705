#!/usr/bin/env python3

from __future__ import annotations

import html
from typing import Any

import pandas as pd
import streamlit as st

from payroll_compare.comparison import ComparisonRow, build_comparison_rows, comparison_totals, default_period_pair
from payroll_compare.core import ColumnMapping, format_delta, format_money, format_percent, unique_periods
from payroll_compare.dashboard import dashboard_stats, department_totals, period_totals
from payroll_compare.export import comparison_csv_text, export_filename
from payroll_compare.ingest import CsvParseError, format_file_size, is_valid_csv_file, parse_csv_bytes
from payroll_compare.insights import InsightsError, generate_insights
from payroll_compare.mapping import (
    OPTIONAL_ROLES,
    REQUIRED_ROLES,
    ROLE_LABELS,
    mapping_from_dict,
    preferences_from_mapping,
    suggest_mapping,
    validate_mapping,
)
from payroll_compare.snapshots import ComparisonSnapshot, SnapshotStore, create_snapshot
from payroll_compare.utils.notes import merge_notes, notes_from_rows

APP_SESSION_SCHEMA_VERSION = "2026-10-payroll-compare-v1"
PAGES = ["Upload", "Worksheet", "Saved", "Dashboard"]
NO_COLUMN = "(none)"


def apply_theme() -> None:
    st.markdown(
        """
<style>
:root {
  --bg-surface: #f8f9fa;
  --text-tertiary: #6c757d;
  --brand-primary: #0f5d75;
  --border-subtle: #dee2e6;
}

.metric-card {
  background: var(--bg-surface);
  border: 1px solid var(--border-subtle);
  border-radius: 8px;
  padding: 1rem 1.25rem;
  box-shadow: 0 1px 3px rgba(0,0,0,0.05);
  margin-bottom: 0.5rem;
}

.metric-card .label {
  font-size: 0.75rem;
  text-transform: uppercase;
  letter-spacing: 0.05em;
  color: var(--text-tertiary);
  font-weight: 600;
  margin-bottom: 0.25rem;
}

.metric-card .value {
  font-size: 1.25rem;
  font-weight: 700;
  color: var(--brand-primary);
  font-family: 'JetBrains Mono', monospace;
}
</style>
        """,
        unsafe_allow_html=True,
    )


def reset_session_if_schema_changed() -> None:
    if st.session_state.get("_app_schema_version") == APP_SESSION_SCHEMA_VERSION:
        return
    for key in ["notes", "worksheet_rows", "worksheet_periods", "insights", "open_snapshot_id"]:
        st.session_state.pop(key, None)
    st.session_state["_app_schema_version"] = APP_SESSION_SCHEMA_VERSION


def get_store() -> SnapshotStore:
    if "store" not in st.session_state:
        st.session_state["store"] = SnapshotStore()
    store: SnapshotStore = st.session_state["store"]
    return store


def metric_card(label: str, value: str) -> None:
    st.markdown(
        f"""
<div class="metric-card">
  <div class="label">{html.escape(label)}</div>
  <div class="value">{html.escape(value)}</div>
</div>
        """,
        unsafe_allow_html=True,
    )


def rows_to_frame(rows: list[ComparisonRow]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "Employee": row.employee_name,
                "Prior": format_money(row.prior_amount),
                "Current": format_money(row.current_amount),
                "Delta": format_delta(row.delta),
                "Delta %": format_percent(row.delta_percent),
                "YTD": format_money(row.year_to_date),
                "Notes": row.note,
            }
            for row in rows
        ]
    )


def notes_from_frame(rows: list[ComparisonRow], frame: pd.DataFrame) -> dict[str, str]:
    notes: dict[str, str] = {}
    for row, note in zip(rows, frame["Notes"].tolist()):
        # Every row is reported, so a cleared cell removes the note.
        notes[row.employee_key] = "" if note is None or (isinstance(note, float) and pd.isna(note)) else str(note)
    return notes


def render_upload(store: SnapshotStore) -> None:
    st.subheader("Upload Payroll CSV")
    uploaded = st.file_uploader("CSV file", type=["csv"])
    if uploaded is None:
        dataset = store.load_dataset()
        if dataset is not None:
            st.caption(f"Current dataset: {len(dataset.rows):,} rows, uploaded {dataset.uploaded_at}.")
        return

    if not is_valid_csv_file(uploaded.name, uploaded.type or ""):
        st.error("Please upload a .csv file.")
        return

    data = uploaded.getvalue()
    try:
        parsed = parse_csv_bytes(data)
    except CsvParseError as e:
        st.error(str(e))
        return

    st.caption(f"{uploaded.name} ({format_file_size(len(data))}): {len(parsed.headers)} columns, {len(parsed.rows):,} rows")

    suggestion = suggest_mapping(parsed.headers, store.load_preferences())
    options = [NO_COLUMN] + parsed.headers
    selection: dict[str, str | None] = {}
    for role in REQUIRED_ROLES + OPTIONAL_ROLES:
        suggested = suggestion.get(role)
        label = ROLE_LABELS[role] + (" *" if role in REQUIRED_ROLES else "")
        choice = st.selectbox(
            label,
            options=options,
            index=options.index(suggested) if suggested in options else 0,
            key=f"map_{role}",
        )
        selection[role] = None if choice == NO_COLUMN else choice

    errors = validate_mapping(selection, parsed.headers)
    for error in errors:
        st.warning(error)

    if st.button("Continue", type="primary", disabled=bool(errors)):
        mapping = mapping_from_dict(selection)
        store.save_dataset(parsed.rows, parsed.headers, mapping)
        store.save_preferences(preferences_from_mapping(mapping))
        for key in ["notes", "worksheet_rows", "worksheet_periods", "insights", "open_snapshot_id"]:
            st.session_state.pop(key, None)
        st.success("Dataset saved. Open the Worksheet to compare pay periods.")


def render_worksheet_rows(
    store: SnapshotStore,
    rows: list[ComparisonRow],
    prior: str,
    current: str,
    snapshot: ComparisonSnapshot | None = None,
) -> None:
    totals = comparison_totals(rows)
    c1, c2, c3, c4 = st.columns(4)
    with c1:
        metric_card("Employees", str(totals["employee_count"]))
    with c2:
        metric_card("Changed", str(totals["changed_count"]))
    with c3:
        metric_card(f"PP{prior} total", format_money(float(totals["prior_total"])))
    with c4:
        metric_card(f"PP{current} total", format_money(float(totals["current_total"])))

    edited = st.data_editor(
        rows_to_frame(rows),
        use_container_width=True,
        hide_index=True,
        # Saved comparisons are read-only.
        disabled=["Employee", "Prior", "Current", "Delta", "Delta %", "YTD"] + (["Notes"] if snapshot else []),
        key=f"editor_{snapshot.id if snapshot else 'live'}_{prior}_{current}",
    )
    rows, _ = merge_notes(rows, notes_from_frame(rows, edited))
    if snapshot is None:
        st.session_state["notes"] = notes_from_rows(rows)

    d1, d2, d3 = st.columns(3)
    with d1:
        st.download_button(
            "Export CSV",
            data=comparison_csv_text(rows),
            file_name=export_filename(prior, current),
            mime="text/csv",
        )
    with d2:
        if snapshot is None and st.button("Save Snapshot"):
            saved = create_snapshot(rows, prior, current, ai_insight=st.session_state.get("insights"))
            store.save_snapshot(saved)
            st.success(f"Saved '{saved.name}'.")
    with d3:
        if st.button("AI Insights", key=f"insights_{snapshot.id if snapshot else 'live'}"):
            try:
                with st.spinner("Analyzing comparison..."):
                    text = generate_insights(rows, prior, current)
            except InsightsError as e:
                st.error(str(e))
            else:
                if snapshot is not None:
                    snapshot = store.update_snapshot_ai_insight(snapshot.id, text)
                else:
                    st.session_state["insights"] = text

    insight = snapshot.ai_insight if snapshot is not None else st.session_state.get("insights")
    if insight:
        st.markdown("#### AI Insights")
        st.write(insight)


def render_worksheet(store: SnapshotStore) -> None:
    dataset = store.load_dataset()
    if dataset is None or dataset.mapping is None:
        st.info("Upload a CSV and map its columns first.")
        return

    mapping: ColumnMapping = dataset.mapping
    periods = unique_periods(dataset.rows, mapping)
    default_pair = default_period_pair(periods)
    if default_pair is None:
        st.error("No pay periods found in the mapped period column.")
        return

    p1, p2 = st.columns(2)
    with p1:
        prior = st.selectbox("Prior pay period", options=periods, index=periods.index(default_pair[0]))
    with p2:
        current = st.selectbox("Current pay period", options=periods, index=periods.index(default_pair[1]))

    if st.session_state.get("worksheet_periods") != (prior, current):
        st.session_state["worksheet_periods"] = (prior, current)
        st.session_state.pop("insights", None)

    rows = build_comparison_rows(dataset.rows, mapping, prior, current, st.session_state.get("notes", {}))
    render_worksheet_rows(store, rows, prior, current)


def render_saved(store: SnapshotStore) -> None:
    snapshots = store.load_snapshots()
    if not snapshots:
        st.info("No saved comparisons yet.")
        return

    labels = {item.id: f"{item.name} ({len(item.rows)} employees)" for item in snapshots}
    selected_id = st.selectbox("Saved comparison", options=list(labels), format_func=lambda key: labels[key])
    snapshot = next(item for item in snapshots if item.id == selected_id)

    if st.button("Delete", type="secondary"):
        store.delete_snapshot(snapshot.id)
        st.rerun()

    render_worksheet_rows(store, snapshot.rows, snapshot.prior_period, snapshot.current_period, snapshot=snapshot)


def render_dashboard(store: SnapshotStore) -> None:
    dataset = store.load_dataset()
    if dataset is None or dataset.mapping is None:
        st.info("No data yet. Upload a payroll CSV to see the dashboard.")
        return

    stats = dashboard_stats(dataset.rows, dataset.mapping)
    c1, c2, c3, c4, c5 = st.columns(5)
    with c1:
        metric_card("Total Payroll", format_money(stats.total_payroll))
    with c2:
        metric_card("Employees", str(stats.employee_count))
    with c3:
        metric_card("Pay Periods", str(stats.period_count))
    with c4:
        metric_card("Departments", str(stats.department_count))
    with c5:
        metric_card("Avg per Period", format_money(stats.average_payroll))

    by_period: list[dict[str, Any]] = [
        {"Pay Period": item.period, "Total": item.total} for item in period_totals(dataset.rows, dataset.mapping)
    ]
    by_department: list[dict[str, Any]] = [
        {"Department": item.department, "Total": item.total}
        for item in department_totals(dataset.rows, dataset.mapping)
    ]

    if by_period:
        st.markdown("#### Payroll Trend")
        trend = pd.DataFrame(by_period)
        # Keep engine order on the x axis instead of Streamlit's alphabetical sort.
        trend["Pay Period"] = pd.Categorical(trend["Pay Period"], categories=trend["Pay Period"].tolist(), ordered=True)
        st.line_chart(trend, x="Pay Period", y="Total")

    st.markdown("#### By Department")
    st.bar_chart(pd.DataFrame(by_department), x="Department", y="Total")
    st.dataframe(by_department, use_container_width=True)


def main() -> None:
    st.set_page_config(page_title="Payroll Compare", page_icon="📊", layout="wide")
    reset_session_if_schema_changed()
    apply_theme()

    st.markdown("# Payroll Compare")
    store = get_store()

    with st.sidebar:
        st.header("Navigation")
        page = st.radio("Page", options=PAGES, label_visibility="collapsed")
        st.caption(f"Data directory: `{store.root}`")

    if page == "Upload":
        render_upload(store)
    elif page == "Worksheet":
        render_worksheet(store)
    elif page == "Saved":
        render_saved(store)
    else:
        render_dashboard(store)


if __name__ == "__main__":
    main()
