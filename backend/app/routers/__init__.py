"""
路由模块包 (Router Module Package)

- http_monitoring.py: 按 popsite 代理 Prometheus HTTP 探测数据，返回健康标记序列

路由注册:
所有路由模块在 main.py 的 create_app() 中通过 app.include_router() 统一注册。
"""
