"""密码哈希与校验（passlib）

哈希计算为 CPU 密集操作，异步代码中经 asyncio.to_thread 调用。
"""

from passlib.context import CryptContext

pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """常量时间比较；哈希格式无法识别时视为校验失败"""
    try:
        return pwd_context.verify(plain_password, hashed_password)
    except ValueError:
        return False


def dummy_verify() -> None:
    """用户名不存在时也执行一次哈希，避免通过耗时枚举用户名"""
    pwd_context.dummy_verify()
