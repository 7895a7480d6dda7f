"""Homomorphic ElGamal encryption, ballots, threshold key generation and scalar ECIES."""