"""
Contiguous Memory Allocator Visualizer — First, Best & Worst Fit

This application provides an interactive simulation and visualization of a
contiguous memory allocator, the classic variable-partition scheme of early
Operating Systems:
    - Requesting memory with First Fit, Best Fit or Worst Fit placement
    - Releasing memory and coalescing neighbouring free blocks
    - Compaction of all free space into one block
    - External fragmentation metrics

Built with Streamlit for the web interface and Plotly for visualizations.
The same command language as the terminal shell (RQ, RL, C, STAT) can be
run from the "Command Script" box.

Run with:
    streamlit run app.py
"""

# =============================================================================
# IMPORTS
# =============================================================================

import io                                     # Captures shell output for display
import streamlit as st                        # Web application framework
from engine import AllocatorError, FitStrategy, MemoryEngine
from shell import Shell                       # Same interpreter as the CLI
from utils import build_layout_figure, get_color


# =============================================================================
# STREAMLIT UI - Web Application Interface
# =============================================================================

# Configure the Streamlit page
st.set_page_config(page_title="Contiguous Memory Allocator", layout="wide")

st.title("Contiguous Memory Allocator — First, Best & Worst Fit")

# -----------------------------------------------------------------------------
# SIDEBAR - Simulation Settings
# -----------------------------------------------------------------------------

st.sidebar.header("Simulation Settings")

# Size of the address space
capacity = st.sidebar.number_input(
    "Memory size (bytes)",
    min_value=1,
    max_value=1_000_000,
    value=1000,
    step=100,
)

# Placement strategy used by the request form
strategy = st.sidebar.selectbox(
    "Placement strategy",
    options=[FitStrategy.FIRST, FitStrategy.BEST, FitStrategy.WORST],
    format_func=lambda code: FitStrategy.NAMES[code],
)

# -----------------------------------------------------------------------------
# SESSION STATE - Engine Persistence
# -----------------------------------------------------------------------------

# Initialize engine in session state (persists across Streamlit reruns)
if 'engine' not in st.session_state:
    st.session_state.engine = MemoryEngine(int(capacity))
elif st.session_state.engine.capacity != int(capacity):
    # Memory size changed: start over with a fresh address space
    st.session_state.engine = MemoryEngine(int(capacity))

engine: MemoryEngine = st.session_state.engine

# Reset button to clear simulation state
if st.sidebar.button("Reset Simulation"):
    engine.reset()
    st.sidebar.success("Simulation reset")

st.sidebar.markdown("---")

# =============================================================================
# MAIN CONTENT AREA - Two Column Layout
# =============================================================================

col1, col2 = st.columns([1, 2])

# -----------------------------------------------------------------------------
# LEFT COLUMN - Controls and Event Log
# -----------------------------------------------------------------------------

with col1:
    st.subheader("Request Memory")

    with st.form("request_form", clear_on_submit=True):
        pid = st.text_input("Process ID", value="")
        size = st.number_input("Size (bytes)", min_value=1, value=100, step=10)
        submitted = st.form_submit_button("Request")

    if submitted:
        try:
            start, end = engine.allocate(pid.strip(), int(size), strategy)
            st.success(f"{pid.strip()} placed at [{start}, {end})")
        except AllocatorError as e:
            st.error(str(e))

    st.subheader("Release Memory")
    processes = engine.processes()
    victim = st.selectbox("Process", options=processes, disabled=not processes)
    if st.button("Release", disabled=not processes):
        try:
            start, end = engine.release(victim)
            st.success(f"Released {victim} from [{start}, {end})")
        except AllocatorError as e:
            st.error(str(e))

    st.subheader("Compaction")
    if st.button("Compact"):
        moved = engine.compact()
        st.success(f"Compaction moved {moved} block(s)")

    # Run a script in the shell's command language
    st.subheader("Command Script")
    script = st.text_area("One command per line", value="RQ P1 100 F\nRQ P2 50 B\nRL P1\nC\nSTAT")
    if st.button("Run Script"):
        buffer = io.StringIO()
        shell = Shell(engine, out=buffer)
        for line in script.splitlines():
            if not shell.execute(line):
                break
        st.code(buffer.getvalue() or "(no output)")

    # Display event log (most recent 20 events, newest first)
    st.subheader("Event Log")
    for ev in engine.event_log[-20:][::-1]:
        st.write(ev)

# -----------------------------------------------------------------------------
# RIGHT COLUMN - Visualizations
# -----------------------------------------------------------------------------

with col2:
    report = engine.report()

    # ----- Address Space Visualization -----
    st.subheader("Address Space")
    fig = build_layout_figure(report, engine.capacity)
    st.plotly_chart(fig, use_container_width=True)

    # ----- Block Table -----
    st.subheader("Block List")
    rows = []
    for start, end, owner in report:
        rows.append({
            "start": start,
            "end": end,
            "size": end - start,
            "owner": owner,
            "color": get_color(owner),
        })
    st.table(rows)

    # ----- Statistics Display -----
    st.subheader("Statistics")
    metrics = engine.get_fragmentation_metrics()

    m1, m2, m3 = st.columns(3)
    m1.metric("Free Space", engine.free_space)
    m2.metric("Utilization", metrics['utilization'])
    m3.metric("External Fragmentation", metrics['external'])
    st.caption(
        f"{metrics['free_blocks']} free block(s), largest {metrics['largest_free']} bytes"
    )

# =============================================================================
# FOOTER - Usage Tips
# =============================================================================

st.markdown("---")
st.markdown(
    "**Usage tips**:\n"
    "- Request the same sizes with different strategies to compare placements.\n"
    "- Release alternate processes to create holes, then watch a large request fail.\n"
    "- Compact to gather every hole into one free block at the end of memory."
)
