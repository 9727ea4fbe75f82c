"""未成年用户合规核心：年龄策略、消费额度、时段与连续使用限制、家长同意流程"""

__version__ = "0.1.0"
