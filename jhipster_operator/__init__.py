"""JHipster application operator: controller core, cluster adapter and HTTP surface."""
