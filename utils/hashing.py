from passlib.context import CryptContext

# bcrypt only looks at the first 72 bytes of a password
BCRYPT_MAX_BYTES = 72

bcrypt_context = CryptContext(schemes=['bcrypt'], deprecated='auto')


def hash_password(password: str) -> str:
    return bcrypt_context.hash(password[:BCRYPT_MAX_BYTES])


def verify_password(plain_password: str, hashed_password: str | None) -> bool:
    if not hashed_password:
        return False
    try:
        return bcrypt_context.verify(plain_password[:BCRYPT_MAX_BYTES], hashed_password)
    except ValueError:
        # Stored value is not a hash passlib recognises
        return False
