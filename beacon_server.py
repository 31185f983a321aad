# 标准库
import json
import time
from datetime import datetime, timezone

# 第三方库
import uvicorn
from fastapi import FastAPI, Query, Request

# 本地模块
from aprs_beacon import activity_log, data_memory_cache, settings_store
from aprs_beacon.aprs_packet import PacketFormat, generate_packets
from aprs_beacon.aprs_report import transmit_packets
from aprs_beacon.beacon_task import BeaconScheduler
from aprs_beacon.config import GLOBAL_CONFIG
from aprs_beacon.models import GeoPosition, StationIdentity
from aprs_beacon.responses import error_response, fixed_json_response
from aprs_beacon.speed_estimator import backfill_speed
from aprs_beacon.validation import derive_passcode, is_valid_station_identity

DEFAULT_DEVICE_ID = "default"

app = FastAPI()

PACKET_FORMAT = PacketFormat(path=GLOBAL_CONFIG["packet_path"])

beacon = BeaconScheduler(transmit=transmit_packets,
                         packet_format=PACKET_FORMAT)


async def read_json_body(request: Request) -> dict:
    body = await request.body()
    req_data = json.loads(body.decode() or "{}")
    if not isinstance(req_data, dict):
        raise ValueError("request body must be a JSON object")
    return req_data


@app.on_event("shutdown")
def graceful_shutdown():
    print("[Beacon] Application is shutting down, stopping beacon")
    beacon.stop()


@app.post("/api/location")
async def upload_location(request: Request):
    try:
        req_data = await read_json_body(request)
        if req_data.get("timestamp") in (None, ""):
            req_data["timestamp"] = int(time.time() * 1000)
        position = GeoPosition.from_dict(req_data)
    except ValueError as e:
        print(f"[APRS_Service][uploadLocation] invalid body: {e}")
        return error_response(f"Invalid location: {e}")

    device_id = str(req_data.get("deviceId") or DEFAULT_DEVICE_ID)

    # 定位源自带速度时不估算
    previous = data_memory_cache.get_position(device_id)
    current = backfill_speed(previous, position)
    data_memory_cache.update_position(device_id, current)
    estimated = position.speed is None and current.speed is not None
    print(f"[Cache] Position for device_id：{device_id}, speed:{current.speed}, estimated:{estimated}")

    settings = settings_store.load_settings()
    callsign = settings.get("callsign")
    passcode = settings.get("passcode")
    response_data = {
        "success": True,
        "deviceId": device_id,
        "speed": current.speed,
        "estimated": estimated,
        "packets": [],
    }
    if not is_valid_station_identity(callsign, passcode):
        response_data["message"] = "Callsign and passcode are required to build packets"
        return fixed_json_response(response_data)

    packets = generate_packets(
        callsign.strip(),
        current.latitude,
        current.longitude,
        comment_text=settings.get("comment_text"),
        status_text=settings.get("status_text"),
        speed_mps=current.speed,
        packet_format=PACKET_FORMAT,
    )
    response_data["packets"] = packets

    if req_data.get("transmit"):
        result = transmit_packets(StationIdentity(callsign.strip(), passcode.strip()), packets)
        if result.success:
            activity_log.log_success(result.message)
        else:
            activity_log.log_error(result.message)
        response_data["success"] = result.success
        response_data["result"] = result.to_dict()

    return fixed_json_response(response_data)


@app.post("/api/packets")
async def preview_packets(request: Request):
    try:
        req_data = await read_json_body(request)
        callsign = req_data.get("callsign") or ""
        if not callsign.strip():
            raise ValueError("missing callsign")
        if req_data.get("latitude") is None or req_data.get("longitude") is None:
            raise ValueError("missing latitude or longitude")
        speed = req_data.get("speed")
        packets = generate_packets(
            callsign.strip(),
            float(req_data["latitude"]),
            float(req_data["longitude"]),
            comment_text=req_data.get("commentText"),
            status_text=req_data.get("statusText"),
            speed_mps=float(speed) if speed is not None else None,
            packet_format=PACKET_FORMAT,
        )
    except (ValueError, TypeError, AttributeError) as e:
        return error_response(f"Invalid request: {e}")
    return fixed_json_response({"success": True, "packets": packets})


@app.post("/api/aprs-transmit")
async def aprs_transmit(request: Request):
    now = datetime.now(timezone.utc).isoformat()
    try:
        req_data = await read_json_body(request)
    except ValueError as e:
        print(f"[APRS_Service][ERROR] APRS transmission error: {e}")
        return fixed_json_response({
            "success": False,
            "message": f"Failed to transmit APRS packet: {e}",
            "timestamp": now,
        }, status_code=500)

    callsign = req_data.get("callsign")
    passcode = req_data.get("passcode")
    packet = req_data.get("packet")
    if not callsign or not passcode or not packet:
        return fixed_json_response({
            "success": False,
            "message": "Missing required fields: callsign, passcode, or packet",
            "timestamp": now,
        }, status_code=400)

    print(f"[APRS_Service]Transmission request, callsign:{callsign}, packet:{packet}")
    packets = packet if isinstance(packet, list) else [packet]
    result = transmit_packets(StationIdentity(str(callsign), str(passcode)), [str(p).rstrip("\r\n") for p in packets])
    if result.success:
        activity_log.log_success(result.message)
    else:
        activity_log.log_error(result.message)
    return fixed_json_response({
        "success": result.success,
        "message": result.message,
        "timestamp": result.timestamp.isoformat(),
    }, status_code=200 if result.success else 500)


@app.get("/api/passcode")
async def get_passcode(callsign: str = Query(...)):
    if not callsign.strip():
        return error_response("Missing callsign")
    return fixed_json_response({
        "callsign": callsign.strip().upper(),
        "passcode": derive_passcode(callsign.strip()),
    })


@app.get("/api/settings")
async def get_settings():
    return fixed_json_response(settings_store.load_settings())


@app.post("/api/settings")
async def update_settings(request: Request):
    try:
        req_data = await read_json_body(request)
    except ValueError as e:
        return error_response(f"Invalid settings: {e}")
    settings = settings_store.load_settings()
    settings.update(settings_store.normalize_settings(req_data))
    settings_store.save_settings(settings)
    print(f"[Settings] Updated keys: {sorted(settings_store.normalize_settings(req_data))}")
    return fixed_json_response(settings_store.load_settings())


@app.get("/api/logs")
async def get_logs():
    return fixed_json_response({"logs": activity_log.get_recent_logs()})


@app.get("/api/beacon")
async def beacon_status():
    return fixed_json_response({
        "running": beacon.running,
        "interval": beacon.interval,
        "wakeLock": beacon.wake_lock.held,
    })


@app.post("/api/beacon/start")
async def beacon_start():
    started = beacon.start()
    if started:
        activity_log.log_info(f"Beacon started, interval {beacon.interval}s")
    return fixed_json_response({"running": beacon.running, "started": started})


@app.post("/api/beacon/stop")
async def beacon_stop():
    stopped = beacon.stop()
    if stopped:
        activity_log.log_info("Beacon stopped")
    return fixed_json_response({"running": beacon.running, "stopped": stopped})


if __name__ == "__main__":
    uvicorn.run("beacon_server:app", host="0.0.0.0", port=int(GLOBAL_CONFIG["http_service_port"]))
