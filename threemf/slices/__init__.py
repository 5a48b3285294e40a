"""Data model, decoding, encoding and validation for the 3MF slice extension."""