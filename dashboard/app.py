import os
from typing import Any

import pandas as pd
import plotly.express as px
import requests
import streamlit as st
from streamlit_autorefresh import st_autorefresh


DEFAULT_BACKEND_URL = os.getenv("BACKEND_API_URL", "http://localhost:8000/api")
REQUEST_TIMEOUT = 30

SENSOR_LABELS = {"moisture": "Moisture", "temperature": "Temperature", "ph": "pH", "ec": "EC"}
NUTRIENT_LABELS = {
    "nitrogen": "N",
    "phosphorus": "P",
    "potassium": "K",
    "sulphur": "S",
    "zinc": "Zn",
    "iron": "Fe",
    "boron": "B",
    "copper": "Cu",
}
ROVER_COMMANDS = [
    ("Forward", "drive", 1),
    ("Left", "turn", -30),
    ("Right", "turn", 30),
    ("Back", "drive", -1),
    ("Probe", "probe", 1),
]


st.set_page_config(page_title="Groundhog Farm Monitor", layout="wide")


def http() -> requests.Session:
    # one session per browser tab so the farm_id cookie sticks
    if "http" not in st.session_state:
        st.session_state["http"] = requests.Session()
    return st.session_state["http"]


def _error_text(exc: requests.RequestException) -> str:
    response = getattr(exc, "response", None)
    if response is not None:
        try:
            return str(response.json().get("detail", exc))
        except ValueError:
            pass
    return str(exc)


def api_get(base_url: str, path: str, params: dict[str, Any] | None = None) -> tuple[Any, str | None]:
    try:
        response = http().get(f"{base_url}{path}", params=params, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return response.json(), None
    except requests.RequestException as exc:
        return None, _error_text(exc)


def api_post(base_url: str, path: str, payload: dict[str, Any] | None = None) -> tuple[Any, str | None]:
    try:
        response = http().post(f"{base_url}{path}", json=payload or {}, timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        if response.content:
            return response.json(), None
        return {}, None
    except requests.RequestException as exc:
        return None, _error_text(exc)


def api_delete(base_url: str, path: str) -> str | None:
    try:
        response = http().delete(f"{base_url}{path}", timeout=REQUEST_TIMEOUT)
        response.raise_for_status()
        return None
    except requests.RequestException as exc:
        return _error_text(exc)


def render_login(base_url: str) -> None:
    st.header("Farm Login")
    login_col, onboard_col = st.columns(2)

    with login_col:
        with st.form("login"):
            farm_id = st.text_input("Farm ID")
            submitted = st.form_submit_button("Log in", use_container_width=True)
        if submitted and farm_id.strip():
            _, error = api_post(base_url, "/auth/login", {"farm_id": farm_id.strip()})
            if error:
                st.error(error)
            else:
                st.rerun()

    with onboard_col:
        with st.form("onboard"):
            st.write("New farm")
            farm_name = st.text_input("Farm name")
            farmer_name = st.text_input("Farmer name")
            lat = st.number_input("Latitude", min_value=-90.0, max_value=90.0, value=38.0, format="%.6f")
            long = st.number_input("Longitude", min_value=-180.0, max_value=180.0, value=-90.0, format="%.6f")
            created = st.form_submit_button("Create farm", use_container_width=True)
        if created:
            payload = {"farm_name": farm_name, "farmer_name": farmer_name, "lat": lat, "long": long}
            _, error = api_post(base_url, "/farms", payload)
            if error:
                st.error(f"Failed to create farm: {error}")
            else:
                st.rerun()


def render_sensor_map(base_url: str, farm: dict[str, Any]) -> None:
    st.subheader("Sensor Map")
    field = st.selectbox("Sensor", list(SENSOR_LABELS), format_func=SENSOR_LABELS.get)
    heatmap, error = api_get(base_url, "/sensor/heatmap", {"field": field})
    if error:
        st.warning(f"Heatmap unavailable: {error}")
        return
    if not heatmap["points"]:
        st.info("No rover points with this reading yet")
        return

    df = pd.DataFrame(heatmap["points"])
    fig = px.density_map(
        df,
        lat="lat",
        lon="long",
        z="weight",
        hover_data={"value": True},
        radius=20,
        center={"lat": farm["lat"], "lon": farm["long"]},
        zoom=17,
        map_style="open-street-map",
        color_continuous_scale=[list(stop) for stop in heatmap["colorscale"]],
        range_color=(0, 1),
    )
    fig.update_layout(margin={"l": 0, "r": 0, "t": 0, "b": 0}, height=420)
    st.plotly_chart(fig, use_container_width=True)


def render_soil_status(base_url: str) -> None:
    status, error = api_get(base_url, "/soil/status")
    if error:
        st.warning(f"Soil status unavailable: {error}")
        return

    columns = st.columns(len(status["sensors"]))
    for column, item in zip(columns, status["sensors"]):
        label = SENSOR_LABELS.get(item["parameter"], item["parameter"])
        value = "no data" if item["value"] is None else f"{item['value']:.2f}"
        column.metric(label, value, item["band"], delta_color="off")


def render_chemical(base_url: str) -> None:
    st.subheader("Chemical Estimate")
    dates_payload, _ = api_get(base_url, "/sensor/dates")
    dates = dates_payload["dates"] if dates_payload else []

    run_col, chart_col = st.columns([1, 2])
    with run_col:
        selected = st.selectbox("Rover data date", dates, disabled=not dates)
        if st.button("Run New Analysis", disabled=not dates, use_container_width=True):
            with st.spinner("Requesting nutrient prediction..."):
                _, error = api_post(base_url, "/chemical/analysis", {"date": selected})
            if error:
                st.error(f"Analysis failed: {error}")
            else:
                st.success("Chemical analysis stored")

    estimate, error = api_get(base_url, "/chemical/latest")
    with chart_col:
        if error:
            st.info("No chemical estimate yet")
            return
        df = pd.DataFrame(
            {"nutrient": list(NUTRIENT_LABELS.values()), "ppm": [estimate[key] for key in NUTRIENT_LABELS]}
        )
        fig = px.bar(df, x="nutrient", y="ppm", title=f"Nutrients (ppm) - {estimate['created_at'][:10]}")
        st.plotly_chart(fig, use_container_width=True)
        st.caption(f"pH {estimate['ph']:.2f} | EC {estimate['ec']:.2f}")


def render_ai_analysis(base_url: str) -> None:
    header_col, button_col = st.columns([3, 1])
    header_col.subheader("AI Soil Analysis")
    if button_col.button("Reload Analysis", use_container_width=True):
        with st.spinner("Analyzing..."):
            _, error = api_post(base_url, "/ai-analysis/run")
        if error:
            st.error(f"AI analysis failed: {error}")

    analysis, error = api_get(base_url, "/ai-analysis/latest")
    if error:
        st.info('No AI analysis available. Click "Reload Analysis" to generate your first one.')
        return

    output = analysis["output_data"]
    st.write(f"Last analyzed: {analysis['created_at'][:10]}")
    if analysis["is_fallback"]:
        st.warning("The language model was unavailable; showing a generic response.")
    st.markdown(f"**Status:** {output['status']}")
    st.markdown(f"**Summary:** {output['summary']}")
    st.markdown("**Recommendations:**")
    for todo in output["todos"]:
        st.markdown(f"- {todo}")


def render_telemetry(base_url: str) -> None:
    st.subheader("Rover Telemetry")
    snapshot, error = api_get(base_url, "/telemetry/snapshot")
    if error:
        st.warning(f"Telemetry unavailable: {error}")
        return

    status = snapshot["status"]
    connected = status == "connected"
    status_col, action_col = st.columns([2, 1])
    status_col.write(f"Broker: **{status}**")
    if snapshot["last_error"]:
        status_col.caption(snapshot["last_error"])
    with action_col:
        if connected:
            if st.button("Disconnect", use_container_width=True):
                api_post(base_url, "/telemetry/disconnect")
                st.rerun()
        elif st.button("Connect", disabled=status == "connecting", use_container_width=True):
            api_post(base_url, "/telemetry/connect")
            st.rerun()

    command_cols = st.columns(len(ROVER_COMMANDS))
    for column, (label, command, value) in zip(command_cols, ROVER_COMMANDS):
        if column.button(label, disabled=not connected, use_container_width=True):
            _, err = api_post(base_url, "/telemetry/command", {"command": command, "value": value})
            if err:
                st.error(err)
            else:
                st.success(f"Sent {command},{value}")

    rover = snapshot["rover"]
    if rover["lat"] is not None:
        st.write(f"Rover position: {rover['lat']:.6f}, {rover['long']:.6f}")
    if rover["heading_deg"] is not None:
        st.write(f"Heading: {rover['heading_deg']:.0f} deg, last command: {rover['command'] or '-'}")

    history = snapshot["sensor_history"]
    if history:
        df = pd.DataFrame(history)
        df["received_at"] = pd.to_datetime(df["received_at"])
        value_columns = [column for column in ("temperature", "humidity", "EC", "pH") if column in df]
        fig = px.line(df, x="received_at", y=value_columns, title="Live sensor samples")
        st.plotly_chart(fig, use_container_width=True)

        if st.button("Predict nutrients from latest sample"):
            prediction, err = api_post(base_url, "/telemetry/predict")
            if err:
                st.error(err)
            else:
                st.json(prediction)
    else:
        st.caption("Waiting for sensor data...")

    chemical = snapshot["latest_chemical"]
    if chemical:
        st.write(f"Latest pushed estimate ({chemical['source']} format)")
        st.json({key: chemical[key] for key in NUTRIENT_LABELS if key in chemical})


def render_waypoints(base_url: str) -> None:
    st.subheader("Waypoint Paths")
    paths_payload, error = api_get(base_url, "/waypoints/paths")
    if error:
        st.warning(f"Paths unavailable: {error}")
        return

    for path in paths_payload["items"]:
        with st.expander(f"{path['name']} ({len(path['waypoints'])} waypoints)"):
            if path["description"]:
                st.caption(path["description"])
            if path["waypoints"]:
                st.dataframe(pd.DataFrame(path["waypoints"])[["order_index", "name", "lat", "long"]], hide_index=True)
            upload_col, delete_col = st.columns(2)
            if upload_col.button("Upload to rover", key=f"upload-{path['id']}", use_container_width=True):
                _, err = api_post(base_url, f"/telemetry/waypoints/{path['id']}")
                if err:
                    st.error(err)
                else:
                    st.success("Waypoints uploaded")
            if delete_col.button("Delete path", key=f"delete-{path['id']}", use_container_width=True):
                err = api_delete(base_url, f"/waypoints/paths/{path['id']}")
                if err:
                    st.error(err)
                else:
                    st.rerun()

    with st.form("new-path"):
        st.write("Create path")
        name = st.text_input("Path name")
        description = st.text_input("Description")
        waypoints = st.data_editor(
            pd.DataFrame({"name": pd.Series(dtype="str"), "lat": pd.Series(dtype="float"), "long": pd.Series(dtype="float")}),
            num_rows="dynamic",
            hide_index=True,
        )
        submitted = st.form_submit_button("Save path")
    if submitted:
        rows = waypoints.dropna().to_dict("records")
        payload = {"name": name, "description": description or None, "waypoints": rows}
        _, err = api_post(base_url, "/waypoints/paths", payload)
        if err:
            st.error(f"Error saving path: {err}")
        else:
            st.rerun()


st.title("Groundhog Farm Monitor")
st.caption("Rover sensor map, soil nutrient estimates, AI soil analysis and rover telemetry")

with st.sidebar:
    st.header("Settings")
    backend_url = st.text_input("Backend API URL", value=DEFAULT_BACKEND_URL)
    auto_refresh = st.checkbox("Auto refresh", value=False)
    refresh_seconds = st.slider("Refresh interval (seconds)", min_value=5, max_value=60, value=15, step=5)

if auto_refresh:
    st_autorefresh(interval=refresh_seconds * 1000, key="groundhog-refresh")

health_payload, health_error = api_get(backend_url, "/health")
if health_error:
    st.error(f"Backend unavailable: {health_error}")
    st.stop()

session_payload, _ = api_get(backend_url, "/auth/me")
if not session_payload or not session_payload["authenticated"]:
    render_login(backend_url)
    st.stop()

farm, farm_error = api_get(backend_url, "/farms/current")
if farm_error:
    st.error(f"Farm unavailable: {farm_error}")
    st.stop()

with st.sidebar:
    st.write(f"Farm: **{farm['farm_name']}** ({farm['farm_id']})")
    st.write(f"Farmer: {farm['farmer_name']}")
    if st.button("Log out"):
        api_post(backend_url, "/auth/logout")
        st.rerun()

overview_tab, rover_tab, waypoint_tab = st.tabs(["Overview", "Rover", "Waypoints"])

with overview_tab:
    map_col, side_col = st.columns([3, 2])
    with map_col:
        render_sensor_map(backend_url, farm)
        render_soil_status(backend_url)
    with side_col:
        render_ai_analysis(backend_url)
    render_chemical(backend_url)

with rover_tab:
    render_telemetry(backend_url)

with waypoint_tab:
    render_waypoints(backend_url)
