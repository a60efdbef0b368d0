"""FastAPI 主应用"""
import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from uemadesk.api.dashboard import router as dashboard_router
from uemadesk.api.session import router as session_router
from uemadesk.api.tickets import router as tickets_router

# 配置日志
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)

# 创建 FastAPI 应用
app = FastAPI(
    title="UEMA Chamados de Manutenção API",
    description="Registro, triagem e análise por IA de chamados de infraestrutura",
    version="0.1.0",
)

# 配置 CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # 生产环境应该限制具体域名
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# 注册路由
app.include_router(session_router, prefix="/api", tags=["session"])
app.include_router(tickets_router, prefix="/api", tags=["tickets"])
app.include_router(dashboard_router, prefix="/api", tags=["dashboard"])


@app.get("/")
async def root():
    """根路径"""
    return {
        "message": "UEMA Chamados de Manutenção API",
        "version": "0.1.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health():
    """健康检查"""
    return {"status": "ok"}
