from shipquote.models.config_generation import ConfigGeneration
from shipquote.models.delivery_option import DeliveryOption
from shipquote.models.pincode_zone import PincodeZone
from shipquote.models.shipping_weight_slab import ShippingWeightSlab
from shipquote.models.shipping_zone_rate import ShippingZoneRate

__all__ = ["ConfigGeneration", "DeliveryOption", "PincodeZone", "ShippingWeightSlab", "ShippingZoneRate"]
