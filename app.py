"""Streamlit front-end for the stock reconciliation pipeline."""
from __future__ import annotations

from typing import Sequence

import pandas as pd
import streamlit as st

from stock_checker import ReconcileStockUseCase, ReconciliationContext
from stock_checker.application.dto import ReconciliationResponse
from stock_checker.config import SETTINGS, configure_logging
from stock_checker.domain.models import MovementRecord, SnapshotRecord
from stock_checker.presentation.report import render_csv, render_details, render_xlsx, rows_to_dataframe

configure_logging()

st.set_page_config(page_title="Stock Gap Scan", layout="wide")
st.title("Stock Gap Scan")


def movements_to_dataframe(records: Sequence[MovementRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "key": r.key,
                "movement_type": r.movement_type,
                "movement_type_text": r.movement_type_text,
                "posted_at": r.posted_at,
                "quantity": r.quantity,
                "lineage": r.lineage,
            }
            for r in records
        ]
    )


def snapshot_to_dataframe(records: Sequence[SnapshotRecord]) -> pd.DataFrame:
    return pd.DataFrame(
        [
            {
                "key": r.key,
                "description": r.description,
                "on_hand": r.on_hand,
                "lineage": r.lineage,
            }
            for r in records
        ]
    )


def run_reconciliation(
    movements_file, snapshot_file, material_pad: int, sloc_pad: int, tolerance: float
) -> ReconciliationResponse:
    settings = SETTINGS.override(
        material_pad_width=material_pad,
        storage_location_pad_width=sloc_pad,
        tolerance=tolerance,
    )
    context = ReconciliationContext.from_sources(
        movements_file.getvalue(),
        snapshot_file.getvalue(),
        settings,
        movements_name=movements_file.name,
        snapshot_name=snapshot_file.name,
    )
    return ReconcileStockUseCase(context).execute()


if "result" not in st.session_state:
    st.session_state["result"] = None

col1, col2 = st.columns(2)
with col1:
    movements_file = st.file_uploader("Upload movement log (MB51)", type=["xlsx", "xls", "csv"])
with col2:
    snapshot_file = st.file_uploader("Upload stock report (MB5B, block format)", type=["xlsx", "xls", "csv"])

col_a, col_b, col_c = st.columns(3)
with col_a:
    material_pad = st.number_input("Material zero-pad", min_value=0, value=SETTINGS.material_pad_width, step=1)
with col_b:
    sloc_pad = st.number_input("Storage location zero-pad", min_value=0, value=SETTINGS.storage_location_pad_width, step=1)
with col_c:
    tolerance = st.number_input("Delta tolerance", min_value=0.0, value=float(SETTINGS.tolerance), step=0.5)

run_btn = st.button("Run Analysis", disabled=not (movements_file and snapshot_file))
if run_btn and movements_file and snapshot_file:
    try:
        with st.spinner("Reconciling..."):
            st.session_state["result"] = run_reconciliation(
                movements_file, snapshot_file, int(material_pad), int(sloc_pad), float(tolerance)
            )
    except ValueError as exc:
        st.session_state["result"] = None
        st.error(f"Error: {exc}")

result: ReconciliationResponse | None = st.session_state.get("result")
if result is None:
    st.info("Load both files and run the analysis to see results.")
else:
    report = result.report
    st.success(f"Done. Keys matched between movement log and stock report: {report.summary.matched_keys}")

    tabs = st.tabs(["Results", "Details", "Movements", "Snapshot"])
    with tabs[0]:
        st.dataframe(rows_to_dataframe(report.rows), use_container_width=True)
        st.download_button(
            "Download results XLSX",
            data=render_xlsx(report.rows),
            file_name="gap_scan_results.xlsx",
            mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            disabled=not report.rows,
        )
        st.download_button(
            "Download results CSV",
            data=render_csv(report.rows),
            file_name="gap_scan_results.csv",
            mime="text/csv",
            disabled=not report.rows,
        )
    with tabs[1]:
        keys = [row.key for row in report.rows]
        if keys:
            selected = st.selectbox("Key", keys)
            row = report.find(selected)
            st.code(render_details(row) if row else "", language=None)
    with tabs[2]:
        st.dataframe(movements_to_dataframe(result.movements))
    with tabs[3]:
        st.dataframe(snapshot_to_dataframe(result.snapshot))
