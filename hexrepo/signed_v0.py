# vim: set noexpandtab: -*- indent-tabs-mode: t -*-
"""
Signed registry envelope (v0).

Pinned wire format (protobuf, proto2):

  message Signed {
    required bytes payload = 1;
    optional bytes signature = 2;
  }

The signature covers the exact `payload` bytes. The payload itself is opaque
here; decoding the inner package message is the caller's business.
"""

from __future__ import annotations

from dataclasses import dataclass

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory
from google.protobuf.message import DecodeError

from hexrepo.crypto import BadKey, load_public_key, verify_signature


class Unverified(ValueError):
	"""Signature does not match the payload under the given key."""


class EnvelopeDecodeError(ValueError):
	pass


@dataclass(frozen=True)
class SignedEnvelope:
	payload: bytes
	signature: bytes


def _build_signed_message_class() -> type:
	fdp = descriptor_pb2.FileDescriptorProto()
	fdp.name = "hexrepo/signed.proto"
	fdp.package = "hexrepo"
	fdp.syntax = "proto2"
	msg = fdp.message_type.add()
	msg.name = "Signed"
	for number, name, label in (
		(1, "payload", descriptor_pb2.FieldDescriptorProto.LABEL_REQUIRED),
		(2, "signature", descriptor_pb2.FieldDescriptorProto.LABEL_OPTIONAL),
	):
		f = msg.field.add()
		f.name = name
		f.number = number
		f.label = label
		f.type = descriptor_pb2.FieldDescriptorProto.TYPE_BYTES
	pool = descriptor_pool.DescriptorPool()
	pool.AddSerializedFile(fdp.SerializeToString())
	return message_factory.GetMessageClass(pool.FindMessageTypeByName("hexrepo.Signed"))


_Signed = _build_signed_message_class()


def encode_signed(payload: bytes, signature: bytes) -> bytes:
	return _Signed(payload=payload, signature=signature).SerializeToString()


def decode_signed(body: bytes) -> SignedEnvelope:
	msg = _Signed()
	try:
		msg.ParseFromString(body)
	except DecodeError as err:
		raise EnvelopeDecodeError(str(err)) from err
	# Not every protobuf backend enforces required fields on parse.
	if not msg.HasField("payload"):
		raise EnvelopeDecodeError("envelope has no payload")
	return SignedEnvelope(payload=bytes(msg.payload), signature=bytes(msg.signature))


def decode_and_verify_signed(body: bytes, public_key: bytes) -> bytes:
	"""
	Decode `body` and verify its signature against a PEM public key.

	Raises BadKey when the key cannot be loaded, Unverified when the signature
	does not match, EnvelopeDecodeError when `body` is not an envelope.
	"""
	key = load_public_key(public_key)
	env = decode_signed(body)
	if not env.signature or not verify_signature(key, env.payload, env.signature):
		raise Unverified("registry signature does not match payload")
	return env.payload


__all__ = [
	"BadKey",
	"EnvelopeDecodeError",
	"SignedEnvelope",
	"Unverified",
	"decode_and_verify_signed",
	"decode_signed",
	"encode_signed",
]
