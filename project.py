import os
from datetime import date

import matplotlib.pyplot as plt
import streamlit as st

from geoglobe.config import Config
from geoglobe.data import CountryIndex, DatasetError, download_dataset, load_countries
from geoglobe.engine import resolve
from geoglobe.globe import LEGEND, build_globe, format_distance, rgba_css, tier_color
from geoglobe.logging_config import setup_logging
from geoglobe.session import GameSession, GuessError
from geoglobe.stats import JsonStore, load_saved_game, load_stats, save_game, save_stats

# Set Page Configuration
st.set_page_config(page_title="Geo Globe Game", layout="wide")

st.markdown("""
    <style>
    .block-container {
        padding-top: 2rem;
        padding-bottom: 0rem;
    }
    .guess-chip {
        display: inline-block;
        padding: 4px 12px;
        margin: 0 6px 6px 0;
        border-radius: 8px;
        color: white;
        font-weight: 500;
        text-shadow: 0 0 2px black;
    }
    .legend-dot {
        display: inline-block;
        width: 12px;
        height: 12px;
        border-radius: 50%;
        margin-right: 8px;
    }
    </style>
""", unsafe_allow_html=True)

setup_logging(Config.LOG_LEVEL, Config.LOG_FILE)
store = JsonStore(Config.STORE_PATH)


# ==================== Prepare Geo Data ====================
@st.cache_data
def load_world_countries(path, url):
    if not os.path.exists(path):
        download_dataset(url, path, timeout=Config.DOWNLOAD_TIMEOUT_SEC)
    return load_countries(path)


try:
    countries = load_world_countries(Config.DATA_PATH, Config.DATA_URL)
except DatasetError as exc:
    st.error(f"Could not load the country data: {exc}")
    st.stop()

index = CountryIndex(countries)
today = date.today()


# ==================== Session ====================
def start_session():
    target = resolve(index.countries, today)
    saved = load_saved_game(store, today, target.name)
    guesses = saved.guesses if saved else ()
    st.session_state.game = GameSession(target, index, Config.MAX_GUESSES, guesses)
    st.session_state.game_date = today


if "game" not in st.session_state or st.session_state.get("game_date") != today:
    start_session()

if "guess_text" not in st.session_state:
    st.session_state.guess_text = ""
if "flash" not in st.session_state:
    st.session_state.flash = None

game = st.session_state.game


def submit_guess():
    try:
        record = game.submit(st.session_state.guess_text)
    except GuessError as err:
        st.session_state.flash = ("warning", err.title, err.message)
        return
    st.session_state.guess_text = ""
    save_game(store, today, game)

    if game.game_over:
        stats = load_stats(store, Config.MAX_GUESSES)
        stats.record(game.won, len(game.guesses), today)
        save_stats(store, stats)
        if game.won:
            n = len(game.guesses)
            st.session_state.flash = (
                "success", "🎉 Congratulations!",
                f"You found {game.target.name} in {n} {'guess' if n == 1 else 'guesses'}!",
            )
        else:
            st.session_state.flash = ("error", "Game Over", f"The country was {game.target.name}.")
    else:
        st.session_state.flash = ("info", record.guess, f"{format_distance(record.distance_km)} away.")


def pick_suggestion(name):
    st.session_state.guess_text = name


# ==================== Statistics ====================
def display_stats():
    stats = load_stats(store, Config.MAX_GUESSES)
    c1, c2, c3, c4 = st.columns(4)
    c1.metric("Played", stats.games_played)
    c2.metric("Win %", stats.win_percentage)
    c3.metric("Streak", stats.current_streak)
    c4.metric("Max Streak", stats.max_streak)

    st.markdown("**Guess Distribution**")
    labels = sorted(stats.guess_distribution)
    counts = [stats.guess_distribution[k] for k in labels]
    fig, ax = plt.subplots(figsize=(4, 3))
    ax.barh([str(k) for k in labels], counts, color="#4A628A")
    ax.invert_yaxis()
    ax.set_xlabel("Games won")
    for i, count in enumerate(counts):
        ax.text(count, i, f" {count}", va="center")
    st.pyplot(fig)
    plt.close(fig)


def display_legend():
    st.markdown("### Distance Guide")
    for tier, label in LEGEND:
        st.markdown(
            f"<span class='legend-dot' style='background-color: {rgba_css(tier_color(tier))};'></span>{label}",
            unsafe_allow_html=True,
        )


# ==================== UI ====================
with st.sidebar:
    st.title("🌍 Geo Globe Game")
    region = st.selectbox("Suggest countries from", ["All regions"] + index.regions())
    display_legend()

    with st.expander("📊 Statistics", expanded=game.game_over):
        display_stats()

    with st.expander("ℹ️ How to Play"):
        st.markdown(f"""
Guess the mystery country in {game.max_guesses} tries or less.

- Type a country name and press **Guess**.
- The globe highlights your guess, coloured by how close it is to the target.
- Drag to rotate the globe, scroll to zoom.

A new country is selected each day. Come back daily to test your geography knowledge!
""")

left_col, right_col = st.columns([1.2, 2], gap="large")

with right_col:
    reveal = game.target if game.game_over and not game.won else None
    st.pydeck_chart(build_globe(game.guesses, index, reveal=reveal))

with left_col:
    st.subheader(today.strftime("%d %B %Y"))
    st.markdown(f"**{game.remaining} Guesses Left**")

    flash = st.session_state.flash
    if flash:
        kind, title, message = flash
        getattr(st, kind)(f"**{title}** – {message}")
        st.session_state.flash = None

    if game.game_over:
        if game.won:
            st.success("Come back tomorrow for a new challenge!")
        else:
            st.error(f"The country was {game.target.name}")
    else:
        st.text_input("Your guess", key="guess_text", placeholder="Enter country name...")
        suggestions = index.suggest(
            st.session_state.guess_text,
            limit=Config.SUGGESTION_LIMIT,
            region=None if region == "All regions" else region,
        )
        # hide the suggestion once it is typed out in full
        suggestions = [s for s in suggestions if s.lower() != st.session_state.guess_text.strip().lower()]
        for name in suggestions:
            st.button(name, key=f"suggest_{name}", on_click=pick_suggestion, args=(name,))
        st.button("Guess", type="primary", on_click=submit_guess)

    if game.guesses:
        st.markdown("### Your guesses")
        chips = "".join(
            f"<span class='guess-chip' style='background-color: {rgba_css(tier_color(g.tier))};'>"
            f"{g.guess} · {format_distance(g.distance_km)}</span>"
            for g in game.guesses
        )
        st.markdown(chips, unsafe_allow_html=True)


# to run the code: streamlit run project.py
