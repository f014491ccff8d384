"""
Golden data for confsnap tests.

Realistic CloudFront distribution configurations (trimmed to the fields
the summary profile reads plus enough surrounding structure to look like
a real GetDistributionConfig response), and small flat payloads for the
scalar profile.
"""

import copy
import json
from typing import Any, Dict

DISTRIBUTION_ID = "E2IBMHQ3GCW6ZK"
TARGET_ID = "dist-1"

# Before the pretty-URLs rollout: no function, default root object set
BASE_DISTRIBUTION_CONFIG: Dict[str, Any] = {
    "CallerReference": "site-2025-01-02",
    "Comment": "Static site",
    "DefaultRootObject": "index.html",
    "Enabled": True,
    "HttpVersion": "http2and3",
    "PriceClass": "PriceClass_100",
    "Origins": {
        "Quantity": 1,
        "Items": [
            {
                "Id": "s3-site-origin",
                "DomainName": "site-bucket.s3.eu-west-2.amazonaws.com",
                "OriginPath": "",
                "S3OriginConfig": {"OriginAccessIdentity": ""},
            }
        ],
    },
    "DefaultCacheBehavior": {
        "TargetOriginId": "s3-site-origin",
        "ViewerProtocolPolicy": "redirect-to-https",
        "Compress": True,
        "FunctionAssociations": {"Quantity": 0},
        "CachePolicyId": "658327ea-f89d-4fab-a63d-7e88639e58f6",
    },
    "CacheBehaviors": {"Quantity": 0},
    "CustomErrorResponses": {
        "Quantity": 1,
        "Items": [
            {"ErrorCode": 404, "ResponsePagePath": "/404.html", "ResponseCode": "404"}
        ],
    },
}


def pretty_urls_config() -> Dict[str, Any]:
    """The distribution after the pretty-URLs viewer-request function was attached."""
    config = copy.deepcopy(BASE_DISTRIBUTION_CONFIG)
    config["DefaultRootObject"] = ""
    config["DefaultCacheBehavior"]["FunctionAssociations"] = {
        "Quantity": 1,
        "Items": [
            {
                "FunctionARN": "arn:aws:cloudfront::123456789012:function/pretty-urls-rewriter",
                "EventType": "viewer-request",
            }
        ],
    }
    config["CacheBehaviors"] = {
        "Quantity": 1,
        "Items": [{"PathPattern": "/_next/static/*", "TargetOriginId": "s3-site-origin"}],
    }
    return config


# Flat payloads for the scalar profile
FLAG_ON = {"flag": 1, "count": 3}
FLAG_OFF = {"flag": 0, "count": 3}


def encode(document: Dict[str, Any]) -> bytes:
    """Payload bytes as a ConfigurationService would return them."""
    return json.dumps(document, sort_keys=True).encode("utf-8")
