"""Tests for the permutation test protocol."""

import pytest

from tumblebit_setup import permutation_test
from tumblebit_setup.errors import SearchExhaustedError
from tumblebit_setup.keys import RsaKey, RsaPubKey
from tumblebit_setup.messages import PermutationTestProof
from tumblebit_setup.params import DEFAULT_PUBLIC_STRING as PUBLIC_STRING
from tumblebit_setup.params import PermutationTestSetup
from tumblebit_setup.utils import os2ip

ALPHAS = [41, 89, 191, 937, 1667, 3187, 3347, 7151, 8009]


class TestGetM1M2:
    """Tests for get_m1_m2."""

    @pytest.mark.parametrize(
        "alpha, m1, m2",
        [
            (41, 25, 25),
            (997, 13, 13),
            (4999, 11, 11),
            (7649, 10, 11),
            (20663, 9, 10),
            (33469, 9, 9),
        ],
    )
    def test_reference_values(self, alpha, m1, m2):
        assert permutation_test.get_m1_m2(alpha, 65537, 128) == (m1, m2)

    def test_m1_not_above_m2(self):
        for alpha in ALPHAS:
            for e in [3, 17, 65537]:
                m1, m2 = permutation_test.get_m1_m2(alpha, e, 128)
                assert m1 <= m2

    def test_grows_with_k(self):
        _, m2_low = permutation_test.get_m1_m2(41, 65537, 80)
        _, m2_high = permutation_test.get_m1_m2(41, 65537, 128)
        assert m2_low < m2_high


class TestGetRhos:
    """Tests for get_rhos."""

    def test_deterministic(self, key_1024):
        pub = key_1024.public_key
        rhos1 = permutation_test.get_rhos(25, PUBLIC_STRING, pub, 1024)
        rhos2 = permutation_test.get_rhos(25, PUBLIC_STRING, RsaPubKey(pub.modulus, pub.exponent), 1024)
        assert rhos1 == rhos2

    def test_values_below_modulus(self, key_1024):
        pub = key_1024.public_key
        rhos = permutation_test.get_rhos(25, PUBLIC_STRING, pub, 1024)
        assert len(rhos) == 25
        assert len(set(rhos)) == 25
        for rho in rhos:
            assert len(rho) == 128
            assert os2ip(rho) < pub.modulus

    def test_depends_on_public_string(self, key_1024):
        pub = key_1024.public_key
        assert (
            permutation_test.get_rhos(3, b"a", pub, 1024)
            != permutation_test.get_rhos(3, b"b", pub, 1024)
        )

    def test_index_width_follows_largest_index(self, key_1024):
        """256 values still fit one index octet; 257 need two."""
        pub = key_1024.public_key
        short = permutation_test.get_rhos(3, PUBLIC_STRING, pub, 1024)
        assert permutation_test.get_rhos(256, PUBLIC_STRING, pub, 1024)[:3] == short
        assert permutation_test.get_rhos(257, PUBLIC_STRING, pub, 1024)[:3] != short

    def test_exhausted(self, key_1024):
        with pytest.raises(SearchExhaustedError):
            permutation_test.get_rhos(3, PUBLIC_STRING, key_1024.public_key, 1024, max_attempts=0)


class TestCheckAlphaN:
    """Tests for check_alpha_n."""

    def test_rough_modulus(self, key_1024):
        assert permutation_test.check_alpha_n(33469, key_1024.modulus)

    def test_small_factor(self):
        q = 1000003
        assert not permutation_test.check_alpha_n(41, 37 * q)
        assert not permutation_test.check_alpha_n(41, 2 * q)

    def test_factor_equal_to_alpha_allowed(self):
        """Only primes strictly below alpha are checked."""
        assert permutation_test.check_alpha_n(41, 41 * 1000003)
        assert not permutation_test.check_alpha_n(42, 41 * 1000003)


class TestProveVerify:
    """Round trips and tamper checks."""

    @pytest.mark.parametrize("alpha", ALPHAS)
    def test_round_trip(self, key_1024, alpha):
        signatures = permutation_test.prove(
            key_1024.p, key_1024.q, key_1024.exponent, alpha, PUBLIC_STRING
        )
        m1, m2 = permutation_test.get_m1_m2(alpha, key_1024.exponent, 128)
        assert len(signatures) == m2
        assert permutation_test.verify(
            key_1024.public_key, signatures, alpha, 1024, PUBLIC_STRING
        )

    def test_round_trip_2048(self, key_2048):
        setup = PermutationTestSetup(PUBLIC_STRING, alpha=997, key_size=2048)
        proof = key_2048.create_permutation_test_proof(setup)
        assert key_2048.public_key.verify_permutation_test(proof, setup)

    def test_round_trip_serialized(self, key_1024):
        setup = PermutationTestSetup(PUBLIC_STRING, alpha=41, key_size=1024, security_parameter=80)
        proof = key_1024.create_permutation_test_proof(setup)
        decoded = PermutationTestProof.from_bytes(proof.to_bytes())
        assert key_1024.public_key.verify_permutation_test(decoded, setup)

    def test_different_modulus(self, key_1024, other_key_1024):
        setup = PermutationTestSetup(PUBLIC_STRING, alpha=41, key_size=1024)
        proof = key_1024.create_permutation_test_proof(setup)
        assert not other_key_1024.public_key.verify_permutation_test(proof, setup)

    def test_different_exponent(self, key_1024):
        setup = PermutationTestSetup(PUBLIC_STRING, alpha=41, key_size=1024)
        proof = key_1024.create_permutation_test_proof(setup)
        for e in [3, 65539]:
            wrong = key_1024.public_key.with_exponent(e)
            assert not wrong.verify_permutation_test(proof, setup)

    def test_different_key_size(self, key_1024):
        setup = PermutationTestSetup(PUBLIC_STRING, alpha=41, key_size=1024)
        proof = key_1024.create_permutation_test_proof(setup)
        assert key_1024.public_key.verify_permutation_test(proof, setup)
        for key_size in [1023, 1025, 2048]:
            assert not key_1024.public_key.verify_permutation_test(
                proof, setup.replace(key_size=key_size)
            )
        assert setup.key_size == 1024

    def test_different_public_string(self, key_1024):
        setup = PermutationTestSetup(PUBLIC_STRING, alpha=41, key_size=1024)
        proof = key_1024.create_permutation_test_proof(setup)
        assert not key_1024.public_key.verify_permutation_test(
            proof, setup.replace(public_string=b"another string")
        )

    def test_small_factor_modulus(self, small_factor_primes):
        """N = (prime below alpha) * q proves but never verifies."""
        alpha = 997
        p, q = small_factor_primes(43, 1018)
        key = RsaKey.from_factors(p, q, 65537)
        setup = PermutationTestSetup(PUBLIC_STRING, alpha=alpha, key_size=key.bit_length)
        proof = key.create_permutation_test_proof(setup)
        assert not key.public_key.verify_permutation_test(proof, setup)

    def test_degenerate_exponents_rejected(self, key_1024):
        """e = 1 and exponents too large for a float return False."""
        n = key_1024.modulus
        signatures = [b"\x00" * 128] * 25
        for e in [1, n**2]:
            pub = RsaPubKey(n, e)
            assert not permutation_test.verify(pub, signatures, 41, 1024, PUBLIC_STRING)
            setup = PermutationTestSetup(PUBLIC_STRING, alpha=41, key_size=1024)
            assert not pub.verify_permutation_test(PermutationTestProof(signatures), setup)

    def test_tampered_signature(self, key_1024):
        setup = PermutationTestSetup(PUBLIC_STRING, alpha=89, key_size=1024)
        signatures = list(key_1024.create_permutation_test_proof(setup).signatures)
        for index in [0, len(signatures) - 1]:
            tampered = list(signatures)
            value = os2ip(tampered[index]) ^ 1
            tampered[index] = value.to_bytes(128, "big")
            assert not permutation_test.verify(
                key_1024.public_key, tampered, 89, 1024, PUBLIC_STRING
            )

    def test_malformed_signatures_rejected(self, key_1024):
        """Wrong-width or out-of-range signatures return False, not an error."""
        setup = PermutationTestSetup(PUBLIC_STRING, alpha=89, key_size=1024)
        signatures = list(key_1024.create_permutation_test_proof(setup).signatures)
        pub = key_1024.public_key

        short = list(signatures)
        short[0] = short[0][1:]
        assert not permutation_test.verify(pub, short, 89, 1024, PUBLIC_STRING)

        too_large = list(signatures)
        too_large[0] = b"\xff" * 128
        assert not permutation_test.verify(pub, too_large, 89, 1024, PUBLIC_STRING)

        assert not permutation_test.verify(pub, signatures[:-1], 89, 1024, PUBLIC_STRING)
        assert not permutation_test.verify(pub, [], 89, 1024, PUBLIC_STRING)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
