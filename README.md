# smcbox

smcbox adds up binary inputs from many clients so that no single server sees an
individual input. It contains:

- **Replicated secret sharing**: `smcbox.rss.ReplicatedSecretSharing` splits a secret into
  C(n, t) additive shares and hands each of `n` parties every share except those of one
  `t`-subset. Reconstruction takes, for each share index, the value that at least `t + 1`
  parties agree on.
- **Packed secret sharing**: `smcbox.packed.PackedSecretSharing` shares `k` values in one
  polynomial over a prime field; any `t + k` of the `n` shares reconstruct them.
- **Ligero-style proofs**: `smcbox.ligero.LigeroZK` produces, for every server, a proof
  that the client's inputs are all 0 or 1 and that the replicated shares it hands out add
  up to those inputs. The encoded witness is committed to with the SHA-256 Merkle tree in
  `smcbox.merkle`. `smcbox.verify` checks such a proof.
- **A client**: `smcbox.client.Client` proves each experiment's inputs and posts one
  request per server.
- **An output party**: `smcbox.outputparty.OutputParty` accepts the servers' aggregated
  shares, keeps them in a SQLite database (`smcbox.store.ShareStore`) and reconstructs the
  sums once the server-share deadline has passed.

## Installation

```
pip install .
```

With the test suite:

```
pip install ".[test]"
pytest
```

## Using the library

### Generating and checking a proof

```python
from smcbox.ligero import LigeroZK
from smcbox.verify import is_valid, verify_proof

# 3 secrets in 1 row, 6 servers tolerating 1 fault, prime modulus 10631, 3 opened columns
zk = LigeroZK(3, 1, 6, 1, 10631, 3)
proofs = zk.generate_proof([1, 0, 1])   # one Proof per server

for proof in proofs:
    verify_proof(zk, proof)             # raises VerificationError on failure
    assert is_valid(zk, proof)
```

The constructor raises `ValueError` unless `1 <= m <= n_secret`, `n_server >= 3t + 1`,
`n_open >= 1` and `q` is prime. `generate_proof` raises `ValueError` if the number of
secrets differs from `n_secret`.

`smcbox.proof.proof_size(proof)` returns the theoretical size in bytes of a proof and of
the input shares it carries. `Proof.to_dict()` and `Proof.from_dict()` convert a proof to
and from its JSON form (byte strings as base64).

### Replicated secret sharing

```python
from smcbox.rss import ReplicatedSecretSharing

scheme = ReplicatedSecretSharing(4, 1, 10631)
shares, parties = scheme.split(1)
assert scheme.reconstruct(parties) == 1
```

`reconstruct` raises `smcbox.rss.ReconstructionError` when a share index is missing or
when no value for an index reaches `t + 1` votes.

### Field helpers and randomness

`smcbox.field` offers `mod`, `inverse`, `is_prime`, `lagrange_constants`, `add_matrix`,
`sub_matrix`, `mul_matrix`, `mul_list` and a caching Lagrange `Interpolator`, all modulo a
prime `q`. `smcbox.encoding` transposes matrices and writes integers as 64-digit binary
text.

`smcbox.chacha.CryptoRandSource` is a deterministic generator on the ChaCha20 keystream;
`smcbox.chacha.rand_vector` draws distinct values below `q` from a hash seed.

## Preparing a run

- `smcbox.client_generator.generate_client_config` and `generate_client_config_cloud`
  write one `config_c<N>.json` per client from a JSON template.
- `smcbox.client_generator.generate_client_input` and `generate_client_input_cloud` write
  `input_c<N>.json` files with random bits for each experiment.
- `smcbox.op_generator.generate_op_config` writes `config_op<N>.json` for output parties.
- `smcbox.op_generator.generate_op_input` writes `experiments.json`: client shares due at
  the given time, server shares `t` minutes later, timestamps written by
  `format_timestamp` and read by `parse_timestamp`.

The configuration files are read back with `smcbox.client_config.ClientConfig.load` and
`smcbox.op_config.OutputPartyConfig.load`.

## Commands

| Command | What it does |
| --- | --- |
| `smcbox-client` | Reads a client configuration (`-confpath`) and input file (`-inputpath`), proves each experiment's inputs and posts a gzip-compressed JSON request to every server URL. Timings go to `<logpath>/<client id>.log`. With `-mode malicious`, the default, the code test in the proof for the first server is replaced by zeros; use `-mode honest` otherwise. |
| `smcbox-outputparty` | Loads the experiments (`-inputpath`) into a SQLite file (`-dbpath`, default `smc.db`) and accepts aggregated server shares by POST on `/serverShare/`, over HTTPS with the configured certificate and key when `-mode tls` (the default) or plain HTTP otherwise. Every second it reconstructs each experiment whose server-share deadline has passed and appends the sum to `result.json`; it stops once every experiment is completed. `-n_client` must be non-zero. |
| `smcbox-launch-clients` | Starts `-n` client programs (`--command`) with `config_c<N>.json` and `input_c<N>.json` under the given `-confpath` and `-inputpath` prefixes, and waits for all of them. |
| `smcbox-launch-ops` | Writes `config_op<N>.json` into `<generator-dir>/config` from `<generator-dir>/outputparty_template.json`, starts `-n` output-party programs (`--command`) and waits for them. |
| `smcbox-bench` | Generates a proof for an all-ones input, verifies it for every party and prints the proof and share sizes and timings. The defaults (`--n-secret 100000`, `--m 100`, `--n-server 7`, `--t 2`, `--q 41543`, `--n-open 240`) take a long time; smaller values can be given. |

Each command lists its options with `--help`.

## What is not included

smcbox has no server program. Nothing here receives the clients' requests, verifies
their proofs on the server side of a network, aggregates the shares of many clients, or
posts aggregated shares to the output party; `smcbox.verify` only offers the proof check
itself. There are also no scripts that start a whole deployment of clients, servers and
output party at once.