"""Streamlit front-end for the build damage comparison calculator."""

from __future__ import annotations

import logging
import sys
from collections.abc import Sequence
from pathlib import Path

import altair as alt
import pandas as pd
import streamlit as st

ROOT_DIR = Path(__file__).resolve().parents[1]
if str(ROOT_DIR) not in sys.path:
    sys.path.insert(0, str(ROOT_DIR))

from damage_core import (
    AC_MAX,
    AC_MIN,
    DEFAULT_MIN_DMG,
    DEFAULT_SIM_AC,
    DIE_ORDER,
    POLL_INTERVAL_SECONDS,
    Attack,
    Coordinator,
    Side,
    Stats,
    WorkerError,
    cdf_step_frame,
    make_coordinator,
    means_frame,
    percentile_frame,
    pmf_frame,
)

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(threadName)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

ATTACK_COLUMNS = ["AB", "Flat"] + [die.label for die in DIE_ORDER]
BAR_COLOR = "#4635b1"
PERCENTILE_COLORS = ["#22c55e", "#f97316", "#ef4444"]


def ensure_session_state_defaults() -> None:
    """Populate Streamlit session state with expected default entries."""

    if "coordinator" not in st.session_state:
        # Workers stop when the session state drops the coordinator.
        st.session_state.coordinator = make_coordinator(
            sim_ac=DEFAULT_SIM_AC,
            desired_min_dmg=DEFAULT_MIN_DMG,
        )
        logger.info("Started coordinator for a new session")
    st.session_state.setdefault("sim_ac_input", DEFAULT_SIM_AC)
    st.session_state.setdefault("min_dmg_input", DEFAULT_MIN_DMG)
    st.session_state.setdefault("worker_error", None)
    for side in Side:
        st.session_state.setdefault(f"editor_rev_{side.value}", 0)


def attacks_to_frame(attacks: Sequence[Attack]) -> pd.DataFrame:
    """Return one editable row per attack."""

    rows = [
        [attack.ab, attack.flat] + [attack.dice[die] for die in DIE_ORDER]
        for attack in attacks
    ]
    return pd.DataFrame(rows, columns=ATTACK_COLUMNS)


def frame_to_attacks(frame: pd.DataFrame) -> list[Attack]:
    """Convert editor rows back to attacks.

    Raises
    ------
    ValueError
        If a cell is empty or a damage value is negative.
    """

    attacks: list[Attack] = []
    for row in frame.itertuples(index=False):
        values = list(row)
        if any(pd.isna(value) for value in values):
            raise ValueError("Every attack cell needs a value.")
        ab, flat, *counts = (int(value) for value in values)
        attacks.append(Attack(ab=ab, flat=flat, dice=dict(zip(DIE_ORDER, counts))))
    return attacks


def bump_editor_revision(side: Side) -> None:
    st.session_state[f"editor_rev_{side.value}"] += 1


def render_build_editor(coordinator: Coordinator, side: Side) -> None:
    """Render the attack table and toggles for one build, flagging edits to the coordinator."""

    build = coordinator.build(side)
    with st.container(border=True):
        st.subheader(f"Build {side.value}")

        add_col, remove_col, index_col = st.columns([1.0, 1.0, 1.0])
        if add_col.button("Add attack", key=f"add_attack_{side.value}"):
            build.add_attack()
            coordinator.mark_dirty(side)
            bump_editor_revision(side)
        if build.attacks:
            remove_index = index_col.selectbox(
                "Attack",
                options=list(range(len(build.attacks))),
                format_func=lambda idx: f"Attack {idx + 1}",
                key=f"remove_index_{side.value}",
                label_visibility="collapsed",
            )
            if remove_col.button("Remove", key=f"remove_attack_{side.value}"):
                build.remove_attack(int(remove_index))
                coordinator.mark_dirty(side)
                bump_editor_revision(side)

        column_config = {
            "AB": st.column_config.NumberColumn("AB", step=1, format="%d"),
            "Flat": st.column_config.NumberColumn("Flat dmg", min_value=0, step=1, format="%d"),
        }
        for die in DIE_ORDER:
            column_config[die.label] = st.column_config.NumberColumn(
                die.label, min_value=0, step=1, format="%d"
            )
        edited = st.data_editor(
            attacks_to_frame(build.attacks),
            key=f"attacks_{side.value}_{st.session_state[f'editor_rev_{side.value}']}",
            column_config=column_config,
            hide_index=True,
            num_rows="fixed",
            use_container_width=True,
        )
        try:
            attacks = frame_to_attacks(edited)
        except ValueError as exc:
            st.warning(str(exc))
            attacks = build.attacks
        if attacks != build.attacks:
            build.attacks = attacks
            coordinator.mark_dirty(side)

        toggle_col1, toggle_col2 = st.columns(2)
        crit_enabled = toggle_col1.checkbox(
            "Crits Enabled", value=build.crit_enabled, key=f"crit_{side.value}"
        )
        savage = toggle_col2.checkbox(
            "Savage Attacker", value=build.savage, key=f"savage_{side.value}"
        )
        if crit_enabled != build.crit_enabled or savage != build.savage:
            build.crit_enabled = crit_enabled
            build.savage = savage
            coordinator.mark_dirty(side)

        if build.attacks:
            hints = ", ".join(
                f"#{idx + 1}: {attack.average_damage():.1f}"
                for idx, attack in enumerate(build.attacks)
            )
            st.caption(f"Average damage per hit: {hints}")


def render_shared_inputs(coordinator: Coordinator) -> None:
    """Render the AC and damage threshold inputs shared by both builds."""

    with st.container(border=True):
        ac_col, dmg_col = st.columns(2)
        sim_ac = ac_col.number_input("Sim AC", min_value=1, max_value=30, step=1, key="sim_ac_input")
        min_dmg = dmg_col.number_input(
            "Min desired dmg", min_value=0, step=1, key="min_dmg_input"
        )
    coordinator.set_sim_ac(int(sim_ac))
    coordinator.set_desired_min_dmg(int(min_dmg))


def render_stats_card(side: Side, stats: Stats, desired_min_dmg: int, pending: bool) -> None:
    with st.container(border=True):
        st.markdown(f"**Build {side.value}**")
        mean_col, std_col = st.columns(2)
        mean_col.metric("Mean damage", f"{stats.mean:.2f}")
        std_col.metric("Standard deviation", f"{stats.std_dev:.2f}")
        st.write(
            f"There is {stats.greater_then_chance * 100:.1f}% chance that Build {side.value} "
            "will out damage the other build."
        )
        st.write(
            f"There is {stats.min_dmg_chance * 100:.1f}% chance to deal at least "
            f"{desired_min_dmg} damage."
        )
        if pending:
            st.caption("Recalculating…")


def pmf_chart(stats: Stats, title: str) -> alt.Chart:
    return (
        alt.Chart(pmf_frame(stats.pmf), title=title)
        .mark_bar(color=BAR_COLOR)
        .encode(
            x=alt.X("damage:Q", title="dmg"),
            y=alt.Y("probability:Q", title="chance", axis=alt.Axis(format=".0%")),
            tooltip=[
                alt.Tooltip("damage:Q", title="dmg"),
                alt.Tooltip("probability:Q", title="chance", format=".2%"),
            ],
        )
        .properties(height=260)
    )


def cdf_chart(stats: Stats, title: str) -> alt.LayerChart:
    line = (
        alt.Chart(cdf_step_frame(stats.cdf), title=title)
        .mark_line(strokeWidth=3, color="#7dd3fc")
        .encode(
            x=alt.X("damage:Q", title="dmg"),
            y=alt.Y(
                "probability:Q",
                title="cumulative probability",
                scale=alt.Scale(domain=(0.0, 1.1)),
            ),
        )
    )
    rules = (
        alt.Chart(percentile_frame(stats.cdf))
        .mark_rule(strokeDash=[4, 3])
        .encode(
            x="damage:Q",
            color=alt.Color(
                "label:N",
                title=None,
                scale=alt.Scale(range=PERCENTILE_COLORS),
                legend=alt.Legend(orient="bottom-right"),
            ),
            tooltip=["label:N", "damage:Q"],
        )
    )
    return (line + rules).properties(height=260)


def means_chart(means: list[float], title: str) -> alt.Chart:
    return (
        alt.Chart(means_frame(means), title=title)
        .mark_bar(color=BAR_COLOR, stroke="black", strokeWidth=0.2)
        .encode(
            x=alt.X("ac:O", title="AC"),
            y=alt.Y("mean:Q", title="mean dmg"),
            tooltip=["ac:O", alt.Tooltip("mean:Q", format=".2f")],
        )
        .properties(height=260)
    )


@st.fragment(run_every=POLL_INTERVAL_SECONDS)
def render_results() -> None:
    """Drive the coordinator once per refresh and draw the latest results."""

    coordinator: Coordinator = st.session_state.coordinator
    try:
        coordinator.tick()
    except WorkerError as exc:
        logger.error("Background computation stopped: %s", exc)
        st.session_state.worker_error = str(exc)

    if st.session_state.worker_error:
        st.error(f"Background computation failed: {st.session_state.worker_error}")
        return

    columns = st.columns(2)
    for column, side in zip(columns, Side):
        stats = coordinator.stats(side)
        with column:
            render_stats_card(
                side,
                stats,
                coordinator.desired_min_dmg,
                pending=not coordinator.is_settled(side),
            )
            st.altair_chart(pmf_chart(stats, f"Damage Distribution {side.value}"), use_container_width=True)
            st.altair_chart(cdf_chart(stats, f"Cumulative Distribution {side.value}"), use_container_width=True)
            means = coordinator.means(side)
            if means:
                st.altair_chart(
                    means_chart(means, f"Mean DMG per AC {AC_MIN}-{AC_MAX - 1} for Build {side.value}"),
                    use_container_width=True,
                )


def main() -> None:
    """Entry point used by Streamlit."""

    st.set_page_config(page_title="DND build calculator", layout="wide")
    ensure_session_state_defaults()
    coordinator: Coordinator = st.session_state.coordinator

    st.title("DND build calculator")

    editor_cols = st.columns(2)
    for column, side in zip(editor_cols, Side):
        with column:
            render_build_editor(coordinator, side)

    render_shared_inputs(coordinator)
    st.divider()
    render_results()


if __name__ == "__main__":
    main()
