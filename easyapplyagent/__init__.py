"""
Easy Apply Agent - LinkedIn 登录 / 职位搜索 / Easy Apply 自动化

包初始化：导入时加载项目 .env（凭据等敏感配置放在这里，不进 config.yaml）。
"""

from __future__ import annotations

from dotenv import find_dotenv, load_dotenv

# Auto-load project .env once on package import so LINKEDIN_EMAIL / LINKEDIN_PASSWORD
# work without manually exporting them.
load_dotenv(find_dotenv(usecwd=True), override=False)
