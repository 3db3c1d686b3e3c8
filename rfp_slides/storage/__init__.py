"""
Storage services for the RFP slide generator.

Document stores (MongoDB, Qdrant) and upload archives (local, S3).
"""

from .base import DocumentStore
from .mongodb import MongoDBService, MongoDocumentStore, get_mongo_service
from .qdrant import QdrantService, QdrantDocumentStore, get_qdrant_service
from .s3 import S3Service, get_s3_service
from .archive import UploadArchive, LocalUploadArchive, S3UploadArchive

__all__ = [
    'DocumentStore',
    'MongoDBService',
    'MongoDocumentStore',
    'QdrantService',
    'QdrantDocumentStore',
    'S3Service',
    'UploadArchive',
    'LocalUploadArchive',
    'S3UploadArchive',
    'get_mongo_service',
    'get_qdrant_service',
    'get_s3_service',
]
