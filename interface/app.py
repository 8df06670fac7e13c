# interface/app.py
"""
Akkordseddel Export Tool - Main Application

Thin Streamlit page over the pipeline: upload an exported job file (any
generation), preview the normalized items and totals, download the re-exported
bundle or a demontage version of the job.
"""

import json

import pandas as pd
import streamlit as st

from extraction.convert import convert_montage_to_demontage
from fields.formatting import format_kr
from processor import process_uploaded_file, save_bundle


def _items_frame(model) -> pd.DataFrame:
    """Items as a display table (Danish column names, line order kept)."""
    df = pd.DataFrame(model["items"])
    if df.empty:
        return df

    df = df.rename(
        columns={
            "lineNumber": "Linje",
            "system": "System",
            "category": "Kategori",
            "itemNumber": "Varenr",
            "name": "Navn",
            "unit": "Enhed",
            "quantity": "Antal",
            "unitPrice": "Stk. pris",
            "lineTotal": "Linjebeløb",
        }
    )
    return df.set_index("Linje")


# ============================================================================
# PAGE CONFIG
# ============================================================================
st.set_page_config(
    page_title="Akkordseddel",
    page_icon="📄",
    layout="wide",
    initial_sidebar_state="collapsed",
)

# ============================================================================
# SESSION STATE INITIALIZATION
# ============================================================================
if "bundle" not in st.session_state:
    st.session_state.bundle = None
if "model" not in st.session_state:
    st.session_state.model = None

# ============================================================================
# MAIN APP FLOW
# ============================================================================
st.title("Akkordseddel eksport")

uploaded_file = st.file_uploader("Upload akkordseddel (.json)", type=["json"])
include_spreadsheet = st.checkbox("Medtag regneark (.xlsx)", value=False)

if uploaded_file and st.button("Behandl fil", type="primary"):
    with st.spinner("🔄 Behandler akkordseddel..."):
        success, bundle, model, error = process_uploaded_file(
            file_name=uploaded_file.name,
            data=uploaded_file.getvalue(),
            include_spreadsheet=include_spreadsheet,
        )

    if success:
        st.session_state.bundle = bundle
        st.session_state.model = model
        save_bundle(bundle)
    else:
        st.session_state.bundle = None
        st.session_state.model = None
        st.error(f"❌ Fejl: {error}")

# ============================================================================
# RESULTS SECTION
# ============================================================================
if st.session_state.bundle is not None and st.session_state.model is not None:
    bundle = st.session_state.bundle
    model = st.session_state.model
    meta = model["meta"]
    totals = model["totals"]

    st.success(f"✅ Sag {meta['caseNumber']} behandlet ({len(model['items'])} linjer)")

    cols = st.columns(4)
    cols[0].metric("Materialer", format_kr(totals["materials"]))
    cols[1].metric("Ekstraarbejde", format_kr(totals["extras"]))
    cols[2].metric("Akkordsum", format_kr(totals["akkord"]))
    cols[3].metric("Projektsum", format_kr(totals["project"]))

    st.dataframe(_items_frame(model), width="stretch")

    for renderer, message in bundle.omitted.items():
        st.warning(f"{renderer} blev ikke medtaget: {message}")

    st.download_button(
        label="📥 Download eksport (.zip)",
        data=bundle.artifact.payload,
        file_name=bundle.artifact.file_name,
        mime=bundle.artifact.content_type,
        type="primary",
        width="stretch",
        key="download_bundle",
    )

    if meta["jobType"] == "montage":
        demontage = convert_montage_to_demontage(model)
        st.download_button(
            label="📥 Download som demontage (.json)",
            data=json.dumps(demontage, ensure_ascii=False, indent=2).encode("utf-8"),
            file_name=f"{bundle.artifact.file_name.rsplit('.', 1)[0]}_demontage.json",
            mime="application/json",
            type="secondary",
            width="stretch",
            key="download_demontage",
        )

    if st.button("🔄 Start forfra"):
        for key in list(st.session_state.keys()):
            del st.session_state[key]
        st.rerun()
