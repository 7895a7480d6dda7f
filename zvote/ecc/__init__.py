"""Elliptic curve points (BabyJubJub and BN254 G1) sharing a common interface."""