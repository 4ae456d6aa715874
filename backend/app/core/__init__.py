"""
核心模块包 (Core Module Package)

包含配置管理和全局异常处理等基础组件。

Foundational components: configuration management and global exception handling.
"""
