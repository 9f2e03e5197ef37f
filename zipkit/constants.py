# Encryption method codes (libzip numbering; 0 = not encrypted)
EM_NONE = 0
EM_TRAD_PKWARE = 1  # legacy ZipCrypto, reported but never written
EM_AES_128 = 0x0101
EM_AES_192 = 0x0102
EM_AES_256 = 0x0103

# WinZip AES key sizes per method code
AES_KEY_BITS = {
    EM_AES_128: 128,
    EM_AES_192: 192,
    EM_AES_256: 256,
}

# WinZip AES extra field "strength" byte -> method code
AES_STRENGTH_CODES = {
    1: EM_AES_128,
    2: EM_AES_192,
    3: EM_AES_256,
}

DEFAULT_ENCRYPTION = "aes256"

# General purpose flag bit 0: entry is encrypted
FLAG_ENCRYPTED = 1 << 0

# Oldest pyzipper release with per-key-size WinZip AES writing
MIN_PYZIPPER_VERSION = (0, 3)

DIR_SUFFIX = "/"
