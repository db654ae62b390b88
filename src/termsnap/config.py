"""termsnap 配置

配置分为以下几类：
- 格式配置：dump 文件标记、版本号、cell 类型
- 分配配置：窗口尺寸上限
- 日志/指标配置
- 预览配置
"""

import os

# === 格式配置 ===
DUMP_MARKER = b"PDC"  # dump 文件起始标记（3 字节）
DUMP_VERSION = 2  # 头部字段列表变化时必须递增；v1 为原始 struct 镜像，不可读
CELL_TYPECODE = "I"  # array typecode，一个 cell = 字符 + 属性

# === 分配配置 ===
MAX_WINDOW_CELLS = 1 << 24  # 单个窗口最多 cell 数，超出视为分配失败

# === 日志配置 ===
LOG_LEVEL = os.environ.get("TERMSNAP_LOG_LEVEL", "INFO")  # 日志级别

# === 指标配置 ===
METRICS_ENABLED = True  # 是否启用指标收集

# === 预览配置 ===
PREVIEW_WIDTH = 80  # 无法从窗口推断时的默认渲染宽度
PREVIEW_TITLE = ""  # SVG 标题
