"""
Antimatter Simulation HTTP API

FastAPI host driving one GameSimulation. Requests are serialized onto the
simulation with a re-entrant lock; rejected gameplay actions answer 409,
unknown ids 404 and malformed save strings 400.
"""

from datetime import datetime, timezone
from threading import RLock
from typing import Any, Dict, Optional
from fastapi import FastAPI, HTTPException, Depends, status
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
import uvicorn

from . import __version__, saves
from .autobuyers import BuyMode
from .config import AntimatterConfig, get_config
from .dimensions import DimensionArena, PurchaseResult, TIER_COUNT
from .logging_config import setup_logging
from .shop import ShopItem
from .simulation import GameSimulation


# Pydantic models for API requests
class TickRequest(BaseModel):
    delta_seconds: float = Field(..., gt=0, description="Real seconds to advance")


class BuyDimensionRequest(BaseModel):
    count: int = Field(1, ge=1, description="Exact number of units to buy")


class BoostRequest(BaseModel):
    multiplier: float = Field(..., description="Time multiplier between 1 and 20")


class AccumulateRequest(BaseModel):
    seconds: float = Field(..., ge=0, description="Real seconds spent away")


class AutoBuyerRequest(BaseModel):
    enabled: Optional[bool] = None
    mode: Optional[BuyMode] = None


class ImportRequest(BaseModel):
    data: str = Field(..., description="Base64 export string")


# Game host context
class GameHost:
    """One simulation plus the lock that serializes access to it"""

    def __init__(self, config: Optional[AntimatterConfig] = None):
        self.simulation = GameSimulation(config=config)
        self.lock = RLock()


# Global game host instance
game_host = GameHost()


# Create FastAPI app
app = FastAPI(
    title="Antimatter Simulation API",
    description="Idle-game simulation engine with arbitrary-magnitude numbers",
    version=__version__,
    docs_url="/docs",
    redoc_url="/redoc"
)

# Add CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Dependency to get game host
def get_game_host() -> GameHost:
    return game_host


def _purchase_response(result: PurchaseResult, simulation: GameSimulation, detail: str) -> Dict[str, Any]:
    if not result:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=detail)
    return {"count": result.count, "spent": str(result.spent), "antimatter": str(simulation.antimatter)}


def _require_tier(tier: int) -> None:
    if not DimensionArena.is_valid_tier(tier):
        raise HTTPException(status_code=404, detail=f"Dimension tier must be between 1 and {TIER_COUNT}")


# Health check endpoint
@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now(timezone.utc).isoformat()}


@app.get("/state")
async def get_state(host: GameHost = Depends(get_game_host)):
    """Current simulation state"""
    with host.lock:
        return host.simulation.summary()


@app.post("/tick")
async def tick(request: TickRequest, host: GameHost = Depends(get_game_host)):
    """Advance the simulation"""
    with host.lock:
        result = host.simulation.tick(request.delta_seconds)
        return {
            "antimatter": str(result.currency),
            "advanced": result.advanced,
            "unlocked_tiers": result.unlocked_tiers,
            "infinity_reached": result.infinity_reached
        }


# Dimension endpoints
@app.post("/dimensions/{tier}/buy")
async def buy_dimension(
    tier: int,
    request: Optional[BuyDimensionRequest] = None,
    host: GameHost = Depends(get_game_host)
):
    """Buy an exact number of units"""
    _require_tier(tier)
    count = request.count if request else 1
    with host.lock:
        result = host.simulation.buy_dimension(tier, count)
        return _purchase_response(result, host.simulation, f"Cannot buy {count}x dimension {tier}")


@app.post("/dimensions/{tier}/buy-max")
async def buy_max_dimension(tier: int, host: GameHost = Depends(get_game_host)):
    """Buy as many units as affordable"""
    _require_tier(tier)
    with host.lock:
        result = host.simulation.buy_max_dimension(tier)
        return _purchase_response(result, host.simulation, f"Cannot buy dimension {tier}")


@app.post("/dimensions/{tier}/buy-until-ten")
async def buy_dimension_until_ten(tier: int, host: GameHost = Depends(get_game_host)):
    """Complete the current set of ten"""
    _require_tier(tier)
    with host.lock:
        result = host.simulation.buy_dimension_until_next_set(tier)
        return _purchase_response(result, host.simulation, f"Cannot buy dimension {tier}")


# Tickspeed endpoints
@app.post("/tickspeed/buy")
async def buy_tickspeed(host: GameHost = Depends(get_game_host)):
    with host.lock:
        result = host.simulation.buy_tickspeed()
        return _purchase_response(result, host.simulation, "Cannot afford tickspeed")


@app.post("/tickspeed/buy-max")
async def buy_tickspeed_max(host: GameHost = Depends(get_game_host)):
    with host.lock:
        result = host.simulation.buy_tickspeed_max()
        return _purchase_response(result, host.simulation, "Bulk tickspeed is locked or unaffordable")


# Prestige endpoints
@app.post("/prestige")
async def do_prestige(host: GameHost = Depends(get_game_host)):
    """Reset the run for prestige points"""
    with host.lock:
        result = host.simulation.do_prestige()
        if not result:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=result.reason)
        return {
            "points_gained": result.points_gained,
            "points": host.simulation.prestige.points,
            "total_prestiges": result.total_prestiges,
            "milestones_unlocked": [m.id for m in result.milestones_unlocked]
        }


@app.post("/prestige/upgrades/{upgrade_id}")
async def buy_prestige_upgrade(upgrade_id: str, host: GameHost = Depends(get_game_host)):
    """Buy the next level of a prestige upgrade"""
    with host.lock:
        prestige = host.simulation.prestige
        if upgrade_id not in prestige.upgrades:
            raise HTTPException(status_code=404, detail=f"Unknown upgrade '{upgrade_id}'")

        if not host.simulation.buy_prestige_upgrade(upgrade_id):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT,
                                detail=f"Cannot buy upgrade '{upgrade_id}'")

        upgrade = prestige.get_upgrade(upgrade_id)
        return {"id": upgrade.id, "level": upgrade.level, "points": prestige.points}


# Offline bank endpoints
@app.post("/offline/boost")
async def start_boost(request: BoostRequest, host: GameHost = Depends(get_game_host)):
    """Spend banked time as a multiplier"""
    with host.lock:
        if not host.simulation.start_offline_boost(request.multiplier):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Cannot start boost")

        offline = host.simulation.offline
        return {"multiplier": offline.boost_multiplier, "remaining_seconds": offline.boost_remaining_seconds}


@app.delete("/offline/boost")
async def stop_boost(host: GameHost = Depends(get_game_host)):
    with host.lock:
        if not host.simulation.stop_offline_boost():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="No boost is active")
        return {"stored_seconds": host.simulation.offline.stored_seconds}


@app.post("/offline/accumulate")
async def accumulate_offline(request: AccumulateRequest, host: GameHost = Depends(get_game_host)):
    with host.lock:
        added = host.simulation.accumulate_offline_time(request.seconds)
        return {"added_seconds": added, "stored_seconds": host.simulation.offline.stored_seconds}


@app.post("/offline/upgrades/{upgrade}")
async def upgrade_offline(upgrade: str, host: GameHost = Depends(get_game_host)):
    """Buy a max-time or efficiency level with banked seconds"""
    with host.lock:
        if upgrade == "max-time":
            bought = host.simulation.upgrade_offline_max_time()
        elif upgrade == "efficiency":
            bought = host.simulation.upgrade_offline_efficiency()
        else:
            raise HTTPException(status_code=404, detail=f"Unknown offline upgrade '{upgrade}'")

        if not bought:
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Cannot buy '{upgrade}'")

        offline = host.simulation.offline
        return {
            "max_seconds": offline.max_seconds,
            "efficiency_ratio": offline.efficiency_ratio,
            "stored_seconds": offline.stored_seconds
        }


# Shop and auto-buyer endpoints
@app.post("/shop/{item_id}")
async def buy_shop_item(item_id: str, host: GameHost = Depends(get_game_host)):
    try:
        item = ShopItem.from_id(item_id)
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))

    with host.lock:
        if not host.simulation.buy_shop_item(item):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Not enough premium currency")

        shop = host.simulation.shop
        return {"item": item.item_id, "level": shop.item_level(item), "premium_currency": shop.premium_currency}


@app.put("/autobuyers/{tier}")
async def configure_autobuyer(tier: int, request: AutoBuyerRequest, host: GameHost = Depends(get_game_host)):
    _require_tier(tier)
    with host.lock:
        simulation = host.simulation
        if request.mode is not None:
            simulation.set_autobuyer_mode(tier, request.mode)
        if request.enabled is not None and not simulation.set_autobuyer_enabled(tier, request.enabled):
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=f"Auto-buyer {tier} cannot be switched")

        slot = simulation.autobuyers.slot(tier)
        return {"tier": tier, "unlocked": slot.unlocked, "enabled": slot.enabled, "mode": slot.mode.value}


@app.post("/autobuyers/speed")
async def upgrade_autobuyer_speed(host: GameHost = Depends(get_game_host)):
    with host.lock:
        if not host.simulation.upgrade_autobuyer_speed():
            raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail="Cannot upgrade auto-buyer speed")

        autobuyers = host.simulation.autobuyers
        return {"speed_upgrade_level": autobuyers.speed_upgrade_level, "interval": autobuyers.interval()}


# Save endpoints
@app.get("/save/export")
async def export_save(host: GameHost = Depends(get_game_host)):
    with host.lock:
        return {"data": saves.export_save(host.simulation)}


@app.post("/save/import")
async def import_save(request: ImportRequest, host: GameHost = Depends(get_game_host)):
    with host.lock:
        result = saves.import_save(host.simulation, request.data)
        if not result:
            raise HTTPException(status_code=400, detail=result.reason)
        return {"imported": True, "offline_seconds": result.offline_seconds}


def run_server(host: Optional[str] = None, port: Optional[int] = None, debug: bool = False):
    """Run the FastAPI server"""
    settings = get_config()
    setup_logging(settings.log_level, log_format=settings.log_format, log_file=settings.log_file)
    uvicorn.run(
        "antimatter_core.api:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=debug,
        log_level="info"
    )
